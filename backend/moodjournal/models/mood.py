"""
Mood Entry Schemas
==================
Pydantic models for mood entries and their analysis. These are the
contract between the journaling client and the backend.

Key design decisions:
- reflection is Optional: a mood selection alone is a valid entry.
  It is stored exactly as sent, so "" stays "" and null stays null.
- sentiment / confidence / aiInsights / tags are derived server-side,
  never accepted from the client.
- MoodEntry is a frozen snapshot. The only way to attach analysis is
  ``with_analysis()``, which refuses to run twice.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from moodjournal.models.base import CamelModel, clamp_score

MAX_INSIGHTS = 3
MAX_TAGS = 5


# ---------------------------------------------------------------------------
# Allowed values
# ---------------------------------------------------------------------------

class Mood(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    ANXIOUS = "anxious"
    EXCITED = "excited"
    NEUTRAL = "neutral"


InsightType = Literal["pattern", "trend", "suggestion", "warning"]


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class MoodEntryCreate(CamelModel):
    """Payload the client sends when the user logs a mood."""

    mood: Mood = Field(..., description="Self-selected mood.")
    reflection: Optional[str] = Field(
        default=None,
        max_length=5000,
        description=(
            "Free-text reflection. Optional. If provided AND "
            "aiAnalysisEnabled is true, it is analysed for sentiment "
            "and insights."
        ),
    )
    ai_analysis_enabled: bool = Field(
        default=True,
        description="Whether the reflection may be sent for AI analysis.",
    )


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class Insight(CamelModel):
    """One observation attached to an entry or derived from history."""

    type: InsightType
    title: str
    description: str
    confidence: int = Field(..., ge=0, le=100)
    actionable: Optional[bool] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> int:
        return clamp_score(v, 0, 100, default=50)


class MoodAnalysis(CamelModel):
    """Structured analysis of a reflection, from Claude or the fallback.

    Numeric fields are clamped into range on construction so nothing
    out-of-bounds can reach the store, whatever the model returns.
    """

    detected_mood: Mood
    sentiment: int = Field(default=3, ge=1, le=5)
    confidence: int = Field(default=50, ge=0, le=100)
    insights: list[Insight] = Field(default_factory=list)
    suggested_tags: list[str] = Field(default_factory=list)
    emotional_intensity: int = Field(default=5, ge=1, le=10)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _clamp_sentiment(cls, v: Any) -> int:
        return clamp_score(v, 1, 5, default=3)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> int:
        return clamp_score(v, 0, 100, default=50)

    @field_validator("emotional_intensity", mode="before")
    @classmethod
    def _clamp_intensity(cls, v: Any) -> int:
        return clamp_score(v, 1, 10, default=5)

    @field_validator("insights", mode="before")
    @classmethod
    def _truncate_insights(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return v[:MAX_INSIGHTS]

    @field_validator("suggested_tags", mode="before")
    @classmethod
    def _truncate_tags(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [str(tag) for tag in v[:MAX_TAGS]]

    def entry_fields(self) -> dict[str, Any]:
        """The MoodEntry fields this analysis fills in.

        sentiment and confidence always travel together.
        """
        return {
            "ai_insights": self.model_dump(mode="json", by_alias=True),
            "sentiment": self.sentiment,
            "confidence": self.confidence,
            "tags": list(self.suggested_tags),
        }


# ---------------------------------------------------------------------------
# Stored entry
# ---------------------------------------------------------------------------

class MoodEntry(CamelModel):
    """A persisted mood entry, as returned to the client."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    user_id: str
    mood: Mood
    reflection: Optional[str] = None
    ai_analysis_enabled: bool = True
    # Full analysis payload. Left untyped: rows written by older clients
    # may hold lists, strings or dicts without an ``insights`` list.
    ai_insights: Optional[Any] = None
    sentiment: Optional[int] = Field(default=None, ge=1, le=5)
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    tags: Optional[list[str]] = None
    timestamp: datetime

    @property
    def is_analysed(self) -> bool:
        return self.sentiment is not None

    @property
    def wants_analysis(self) -> bool:
        return bool(self.ai_analysis_enabled and self.reflection and self.reflection.strip())

    def with_analysis(self, analysis: MoodAnalysis) -> MoodEntry:
        """Return a copy carrying *analysis*. An entry is analysed at most once."""
        if self.is_analysed:
            raise ValueError(f"Mood entry {self.id} has already been analysed")
        return self.model_copy(update=analysis.entry_fields())
