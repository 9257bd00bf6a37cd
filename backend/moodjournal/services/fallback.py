"""
Fallback Analyzer
=================
Deterministic stand-ins for everything the Claude API produces. Used
when AI analysis is switched off, the API key is missing, or a call
fails for any reason. Nothing in this module can raise.
"""

from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from moodjournal.models.mood import Insight, Mood, MoodAnalysis, MoodEntry
from moodjournal.models.quote import Quote

# mood -> (sentiment 1-5, emotional intensity 1-10)
MOOD_PROFILES: dict[Mood, tuple[int, int]] = {
    Mood.HAPPY: (4, 6),
    Mood.EXCITED: (5, 8),
    Mood.NEUTRAL: (3, 3),
    Mood.SAD: (2, 6),
    Mood.ANXIOUS: (2, 7),
    Mood.ANGRY: (1, 8),
}
DEFAULT_PROFILE = (3, 5)

FALLBACK_CONFIDENCE = 75
FALLBACK_TAGS = ("general", "wellness")

_KEEP_TRACKING = Insight(
    type="suggestion",
    title="Keep tracking your emotions",
    description=(
        "Regular mood tracking helps build emotional awareness and "
        "identify patterns over time."
    ),
    confidence=90,
    actionable=True,
)

_FALLBACK_QUOTES: dict[Mood, Quote] = {
    Mood.HAPPY: Quote(
        text="Happiness is not a destination, it's a way of life.",
        author="Burton Hills",
        category="joy",
    ),
    Mood.SAD: Quote(
        text="It's okay to not be okay. Healing takes time.",
        author="Anonymous",
        category="comfort",
    ),
    Mood.ANGRY: Quote(
        text="Anger is energy. Channel it into positive change.",
        author="Anonymous",
        category="empowerment",
    ),
    Mood.ANXIOUS: Quote(
        text="You are braver than you believe and stronger than you seem.",
        author="A.A. Milne",
        category="courage",
    ),
    Mood.EXCITED: Quote(
        text="Let your enthusiasm light up the world around you.",
        author="Anonymous",
        category="inspiration",
    ),
    Mood.NEUTRAL: Quote(
        text="In stillness, we find clarity and peace.",
        author="Anonymous",
        category="mindfulness",
    ),
}

# How many of the newest entries the local pattern insight looks at
PATTERN_WINDOW = 7


def mood_profile(mood: str) -> tuple[int, int]:
    """(sentiment, intensity) for *mood*, (3, 5) for anything unknown."""
    try:
        return MOOD_PROFILES[Mood(mood)]
    except ValueError:
        return DEFAULT_PROFILE


def fallback_analysis(mood: str, reflection: Optional[str] = None) -> MoodAnalysis:
    """Analysis derived purely from the selected mood.

    The reflection is accepted for signature parity with the AI path but
    is not inspected. The detected mood is always the selected one.
    """
    sentiment, intensity = mood_profile(mood)
    try:
        detected = Mood(mood)
    except ValueError:
        detected = Mood.NEUTRAL
    return MoodAnalysis(
        detected_mood=detected,
        sentiment=sentiment,
        confidence=FALLBACK_CONFIDENCE,
        insights=[_KEEP_TRACKING.model_copy()],
        suggested_tags=list(FALLBACK_TAGS),
        emotional_intensity=intensity,
    )


def fallback_quote(mood: str) -> Quote:
    try:
        key = Mood(mood)
    except ValueError:
        key = Mood.NEUTRAL
    return _FALLBACK_QUOTES[key].model_copy(update={"mood_context": [key]})


def fallback_pattern_insights(entries: Sequence[MoodEntry]) -> list[Insight]:
    """One 'pattern' insight naming the most frequent recent mood.

    *entries* are expected newest first. Returns [] for no entries.
    """
    recent = list(entries)[:PATTERN_WINDOW]
    if not recent:
        return []

    counts = Counter(entry.mood for entry in recent)
    dominant = max(counts, key=counts.__getitem__)
    return [
        Insight(
            type="pattern",
            title="Mood Pattern Detected",
            description=(
                f"You've been feeling {Mood(dominant).value} frequently this week. "
                "Consider what might be contributing to this pattern."
            ),
            confidence=85,
            actionable=True,
        )
    ]
