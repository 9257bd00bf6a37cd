"""
Quote Schemas
=============
Motivational quotes are static seed data, read-only at runtime.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from moodjournal.models.base import CamelModel
from moodjournal.models.mood import Mood


class Quote(CamelModel):
    id: Optional[str] = None
    text: str
    author: str
    category: Optional[str] = None
    mood_context: Optional[list[Mood]] = None

    def suits(self, mood: str) -> bool:
        return bool(self.mood_context) and mood in self.mood_context  # type: ignore[operator]


class PersonalizedQuoteRequest(CamelModel):
    """Ask Claude for a quote tailored to the user's current mood."""

    mood: Mood
    recent_reflections: list[str] = Field(default_factory=list, max_length=10)
