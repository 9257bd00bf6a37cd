"""
Analytics Aggregator
====================
Summary statistics over a user's mood entries.

Every function here is a pure function of the entry list and "now".
Nothing is cached or maintained incrementally: the routers fetch the
entries and recompute on every request. Empty input never raises; each
metric has a documented default instead.

Calendar-day logic (streak, trend) uses the server's local date.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

import pandas as pd

from moodjournal.models.analytics import AnalyticsSummary, MoodShare, TrendPoint, WeeklySummary
from moodjournal.models.base import round_half_up
from moodjournal.models.mood import Mood, MoodEntry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STREAK_MAX_DAYS = 365
NEUTRAL_HAPPINESS = 3.0
WEEK = timedelta(days=7)


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------

def _aware(ts: datetime) -> datetime:
    """Naive timestamps are taken to be server-local."""
    return ts if ts.tzinfo is not None else ts.astimezone()


def _local_date(ts: datetime) -> date:
    return _aware(ts).astimezone().date()


def _now(now: Optional[datetime]) -> datetime:
    return _aware(now) if now is not None else datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

def compute_streak(entries: Sequence[MoodEntry], today: Optional[date] = None) -> int:
    """Consecutive days with at least one entry, counting back from today.

    The walk always starts at today: no entry today means a streak of 0,
    however long the run before it. Capped at 365 days.
    """
    if today is None:
        today = datetime.now().astimezone().date()

    entry_dates = {_local_date(entry.timestamp) for entry in entries}

    streak = 0
    for offset in range(STREAK_MAX_DAYS):
        if today - timedelta(days=offset) not in entry_dates:
            break
        streak += 1
    return streak


def compute_happiness_score(entries: Sequence[MoodEntry]) -> float:
    """Mean sentiment to one decimal; 3.0 when nothing has been scored."""
    sentiments = [entry.sentiment for entry in entries if entry.sentiment is not None]
    if not sentiments:
        return NEUTRAL_HAPPINESS
    return round_half_up(sum(sentiments) / len(sentiments), 1)


def count_ai_insights(entries: Sequence[MoodEntry]) -> int:
    """Entries whose aiInsights payload carries an ``insights`` list."""
    return sum(
        1
        for entry in entries
        if isinstance(entry.ai_insights, dict)
        and isinstance(entry.ai_insights.get("insights"), list)
    )


def compute_weekly_summary(
    entries: Sequence[MoodEntry],
    now: Optional[datetime] = None,
) -> WeeklySummary:
    """Mood distribution over the trailing 7 days.

    Ties for dominant mood go to whichever mood was counted first, i.e.
    the mood of the newest tied entry when *entries* are newest first.
    Percentages are rounded independently and may not sum to 100.
    """
    cutoff = _now(now) - WEEK
    weekly = [entry for entry in entries if _aware(entry.timestamp) >= cutoff]

    if not weekly:
        return WeeklySummary(dominant_mood=Mood.NEUTRAL, frequency=0, mood_distribution=[])

    counts: Counter[Mood] = Counter(entry.mood for entry in weekly)
    dominant = max(counts, key=counts.__getitem__)
    total = len(weekly)

    return WeeklySummary(
        dominant_mood=dominant,
        frequency=counts[dominant],
        mood_distribution=[
            MoodShare(mood=mood, count=count, percentage=int(round_half_up(count / total * 100)))
            for mood, count in counts.items()
        ],
    )


def compute_happiness_trend(
    entries: Sequence[MoodEntry],
    days: int = 30,
    now: Optional[datetime] = None,
) -> list[TrendPoint]:
    """Daily mean sentiment for the last *days* days, oldest first.

    Only scored entries count; days with none are omitted (sparse is
    fine for the chart).
    """
    cutoff = _now(now) - timedelta(days=days)
    rows = [
        {"date": _local_date(entry.timestamp), "sentiment": entry.sentiment}
        for entry in entries
        if entry.sentiment is not None and _aware(entry.timestamp) >= cutoff
    ]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    daily = (
        df.groupby("date")
        .agg(happiness=("sentiment", "mean"), scored=("sentiment", "size"))
        .reset_index()
        .sort_values("date")
    )

    return [
        TrendPoint(
            date=day,
            happiness_score=round_half_up(float(happiness), 1),
            entry_count=int(scored),
        )
        for day, happiness, scored in daily.itertuples(index=False, name=None)
    ]


def summarize(entries: Sequence[MoodEntry], now: Optional[datetime] = None) -> AnalyticsSummary:
    today = _now(now).astimezone().date()
    summary = AnalyticsSummary(
        total_entries=len(entries),
        happiness_score=compute_happiness_score(entries),
        streak=compute_streak(entries, today=today),
        ai_insights=count_ai_insights(entries),
    )
    logger.debug("Analytics over %d entries: %s", len(entries), summary)
    return summary
