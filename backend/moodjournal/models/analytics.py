"""
Analytics Schemas
=================
Response models for the analytics dashboard. All values are recomputed
from the entry list on every request; nothing here is persisted.
"""

from __future__ import annotations

from datetime import date

from moodjournal.models.base import CamelModel
from moodjournal.models.mood import Mood


class AnalyticsSummary(CamelModel):
    total_entries: int
    happiness_score: float
    streak: int
    ai_insights: int


class MoodShare(CamelModel):
    mood: Mood
    count: int
    percentage: int


class WeeklySummary(CamelModel):
    dominant_mood: Mood
    frequency: int
    mood_distribution: list[MoodShare]


class TrendPoint(CamelModel):
    """Mean sentiment for one local calendar day."""

    date: date
    happiness_score: float
    entry_count: int
