"""
Analytics Router
================
GET /api/v1/analytics          totals, happiness score, streak, AI coverage
GET /api/v1/analytics/weekly   mood distribution over the trailing 7 days
GET /api/v1/analytics/trend    daily happiness over the last N days

All three recompute from the stored entries on every call.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from moodjournal.config import get_settings
from moodjournal.db.store import get_entry_store
from moodjournal.models.analytics import AnalyticsSummary, TrendPoint, WeeklySummary
from moodjournal.models.mood import MoodEntry
from moodjournal.routers.identity import current_user_id
from moodjournal.services.analytics import (
    compute_happiness_trend,
    compute_weekly_summary,
    summarize,
)

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def _all_entries(user_id: str) -> list[MoodEntry]:
    return get_entry_store().list_by_user(user_id, get_settings().analytics_entry_limit)


@router.get("", response_model=AnalyticsSummary, summary="Overall mood analytics")
async def get_analytics(user_id: str = Depends(current_user_id)) -> AnalyticsSummary:
    return summarize(_all_entries(user_id))


@router.get(
    "/weekly",
    response_model=WeeklySummary,
    summary="Weekly mood distribution",
    description="Returns dominantMood 'neutral' with frequency 0 when there are no entries this week.",
)
async def get_weekly_summary(user_id: str = Depends(current_user_id)) -> WeeklySummary:
    return compute_weekly_summary(_all_entries(user_id))


@router.get("/trend", response_model=list[TrendPoint], summary="Daily happiness trend")
async def get_happiness_trend(
    days: int = Query(default=30, ge=1, le=365),
    user_id: str = Depends(current_user_id),
) -> list[TrendPoint]:
    return compute_happiness_trend(_all_entries(user_id), days=days)
