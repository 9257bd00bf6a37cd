"""
Quote Selector
==============
Seed quotes and random selection by mood.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence

from moodjournal.models.mood import Mood
from moodjournal.models.quote import Quote

DEFAULT_QUOTES: list[Quote] = [
    Quote(
        text="The best way to take care of the future is to take care of the present moment.",
        author="Thich Nhat Hanh",
        category="mindfulness",
        mood_context=[Mood.ANXIOUS, Mood.SAD],
    ),
    Quote(
        text="Happiness is not something ready made. It comes from your own actions.",
        author="Dalai Lama",
        category="motivational",
        mood_context=[Mood.SAD, Mood.NEUTRAL],
    ),
    Quote(
        text="The only way out is through.",
        author="Robert Frost",
        category="perseverance",
        mood_context=[Mood.ANGRY, Mood.SAD, Mood.ANXIOUS],
    ),
    Quote(
        text="Every emotion is valid, but not every action is productive.",
        author="Unknown",
        category="emotional intelligence",
        mood_context=[Mood.ANGRY, Mood.ANXIOUS],
    ),
    Quote(
        text="Your current situation is not your final destination.",
        author="Unknown",
        category="hope",
        mood_context=[Mood.SAD, Mood.ANXIOUS],
    ),
    Quote(
        text="Celebrate small victories, they lead to great achievements.",
        author="Unknown",
        category="achievement",
        mood_context=[Mood.HAPPY, Mood.EXCITED, Mood.NEUTRAL],
    ),
]


def select_quote(
    quotes: Sequence[Quote],
    mood: Optional[str] = None,
    rng: random.Random | None = None,
) -> Optional[Quote]:
    """Pick one quote uniformly at random.

    With *mood*, only quotes whose mood_context includes it are candidates;
    if none do, the whole set is. Returns None only for an empty set.
    """
    if not quotes:
        return None

    candidates = list(quotes)
    if mood:
        matching = [q for q in candidates if q.suits(mood)]
        if matching:
            candidates = matching

    return (rng or random).choice(candidates)
