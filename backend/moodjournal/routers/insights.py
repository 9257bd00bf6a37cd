"""
Insights Router
===============
GET /api/v1/insights — pattern insights over the user's recent history.

Claude looks at the newest entries and suggests up to 3 insights. If AI
is disabled or returns nothing, a deterministic "dominant mood" insight
is returned instead. New users with no entries get an empty list.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from moodjournal.config import get_settings
from moodjournal.db.store import get_entry_store
from moodjournal.models.mood import Insight
from moodjournal.routers.identity import current_user_id
from moodjournal.services.fallback import fallback_pattern_insights
from moodjournal.services.mood_analyzer import get_mood_analyzer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/insights", tags=["insights"])


@router.get("", response_model=list[Insight], summary="Pattern insights from recent moods")
async def get_insights(user_id: str = Depends(current_user_id)) -> list[Insight]:
    settings = get_settings()
    history = get_entry_store().list_by_user(user_id, settings.pattern_history_limit)

    if not history:
        return []

    insights: list[Insight] = []
    if settings.enable_ai_analysis:
        insights = await get_mood_analyzer().pattern_insights(history)

    if not insights:
        logger.debug("Using fallback pattern insights for user %s", user_id)
        insights = fallback_pattern_insights(history)

    return insights
