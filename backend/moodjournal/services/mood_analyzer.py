"""
Mood Analyzer Service
=====================
Talks to the Claude API for everything AI-derived:

    analyze()             reflection + selected mood -> MoodAnalysis
    pattern_insights()    recent history -> up to 3 Insights
    personalized_quote()  mood + recent reflections -> Quote

Only ``analyze()`` raises; the enrichment service decides what to do
with the failure. The other two are best-effort and degrade to the
deterministic fallbacks on their own.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from moodjournal.config import Settings, get_settings
from moodjournal.models.mood import MAX_INSIGHTS, Insight, Mood, MoodAnalysis, MoodEntry
from moodjournal.models.quote import Quote
from moodjournal.services.fallback import fallback_quote

logger = logging.getLogger(__name__)

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"

# Two weeks of daily logging
PATTERN_HISTORY_MAX = 14

_ANALYSIS_SYSTEM_PROMPT = """\
You are an expert emotional wellness assistant specialising in mood \
analysis. Provide compassionate, accurate and actionable analysis.

Rules:
- Return ONLY valid JSON with no markdown formatting, no backticks, no explanation.
- Do not repeat names or other identifying details from the reflection.

Required JSON schema:
{
  "detectedMood": "<one of: happy, sad, angry, anxious, excited, neutral>",
  "sentiment": <1-5 integer, 1 = very negative, 5 = very positive>,
  "confidence": <0-100 integer, confidence in this analysis>,
  "insights": [
    {
      "type": "<pattern | trend | suggestion | warning>",
      "title": "<brief insight title>",
      "description": "<detailed, supportive insight>",
      "confidence": <0-100 integer>,
      "actionable": <true | false>
    }
  ],
  "suggestedTags": [<up to 5 short tags, e.g. "work", "relationships", "health">],
  "emotionalIntensity": <1-10 integer>
}
"""

_PATTERN_SYSTEM_PROMPT = """\
You are an expert in emotional pattern analysis and wellness coaching. \
Return ONLY valid JSON with no markdown formatting:
{"insights": [{"type": "<pattern | trend | suggestion | warning>", \
"title": "...", "description": "...", "confidence": <0-100>, \
"actionable": <true | false>}]}
Return at most 3 insights, most important first.
"""

_QUOTE_SYSTEM_PROMPT = """\
You are a compassionate wellness coach who writes short motivational \
quotes. Return ONLY valid JSON with no markdown formatting:
{"text": "...", "author": "<author, or Anonymous if original>", \
"category": "<motivational | calming | inspiring | empowering>"}
"""


class MoodAnalysisError(Exception):
    """The Claude API could not produce a usable analysis."""


class MoodAnalyzerService:
    """Mood analysis, pattern insights and quotes via the Claude API."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._api_url = ANTHROPIC_MESSAGES_URL

    # ------------------------------------------------------------------
    # Entry analysis
    # ------------------------------------------------------------------

    async def analyze(self, reflection: str, mood: str) -> MoodAnalysis:
        """Analyse *reflection* given the user's selected *mood*.

        Raises MoodAnalysisError on any failure: missing API key, HTTP
        error, timeout, or a response that is not a valid analysis.
        """
        if not reflection or not reflection.strip():
            raise MoodAnalysisError("Nothing to analyse: reflection is empty")

        prompt = (
            f'The user selected "{Mood(mood).value}" as their mood.\n\n'
            f'Reflection: "{reflection.strip()}"\n\n'
            "Analyse the reflection and focus on insights that support "
            "emotional awareness and growth."
        )

        try:
            raw = await self._call_claude_api(_ANALYSIS_SYSTEM_PROMPT, prompt)
        except MoodAnalysisError:
            raise
        except Exception as exc:
            raise MoodAnalysisError(f"Claude API call failed: {exc}") from exc

        try:
            parsed = _extract_json(raw)
            if not isinstance(parsed, dict):
                raise ValueError("expected a JSON object")
            return self._to_analysis(parsed, mood)
        except Exception as exc:
            raise MoodAnalysisError(
                f"Unusable analysis response: {raw[:200] if raw else 'empty'}"
            ) from exc

    @staticmethod
    def _to_analysis(parsed: dict[str, Any], selected_mood: str) -> MoodAnalysis:
        # The model occasionally invents moods outside the enumeration;
        # the user's own selection is the safer label.
        detected = parsed.get("detectedMood")
        if detected not in {m.value for m in Mood}:
            parsed = {**parsed, "detectedMood": Mood(selected_mood).value}
        try:
            return MoodAnalysis.model_validate(parsed)
        except ValidationError:
            logger.debug("Analysis payload failed validation: %s", parsed)
            raise

    # ------------------------------------------------------------------
    # History insights
    # ------------------------------------------------------------------

    async def pattern_insights(self, entries: Sequence[MoodEntry]) -> list[Insight]:
        """Up to 3 insights over the newest 14 *entries*. Never raises."""
        recent = list(entries)[:PATTERN_HISTORY_MAX]
        if not recent:
            return []

        history = "\n".join(
            f"{entry.mood.value} on {entry.timestamp:%a %b %d %Y}: "
            f"{entry.reflection or 'No reflection'}"
            for entry in recent
        )
        prompt = (
            "Analyse the following mood history and provide actionable "
            f"insights for emotional wellness:\n\n{history}"
        )

        try:
            raw = await self._call_claude_api(_PATTERN_SYSTEM_PROMPT, prompt)
            parsed = _extract_json(raw)
            items = parsed.get("insights") if isinstance(parsed, dict) else parsed
            if not isinstance(items, list):
                return []
            return [Insight.model_validate(item) for item in items[:MAX_INSIGHTS]]
        except Exception:
            logger.warning("Pattern insight generation failed", exc_info=True)
            return []

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    async def personalized_quote(self, mood: str, recent_reflections: Sequence[str]) -> Quote:
        """A quote written for *mood*; the per-mood fallback on failure."""
        context = ". ".join(r.strip() for r in recent_reflections if r and r.strip())
        prompt = (
            f'Write a personalised motivational quote for someone feeling "{Mood(mood).value}".\n\n'
            f"Recent context from their reflections: {context or 'none'}\n\n"
            "Make it relevant to their current emotional state and supportive."
        )

        try:
            raw = await self._call_claude_api(_QUOTE_SYSTEM_PROMPT, prompt)
            parsed = _extract_json(raw)
            if not isinstance(parsed, dict):
                raise ValueError("expected a JSON object")
            return Quote(
                text=parsed.get("text") or "Every step forward is progress, no matter how small.",
                author=parsed.get("author") or "Anonymous",
                category=parsed.get("category") or "motivational",
                mood_context=[Mood(mood)],
            )
        except Exception:
            logger.warning("Personalised quote generation failed for mood %s", mood, exc_info=True)
            return fallback_quote(mood)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _call_claude_api(self, system_prompt: str, user_prompt: str) -> str:
        """Send one message to Claude and return the concatenated text blocks."""
        if not self._settings.anthropic_api_key:
            raise MoodAnalysisError("ANTHROPIC_API_KEY is not configured")

        headers = {
            "x-api-key": self._settings.anthropic_api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }

        payload = {
            "model": self._settings.anthropic_model,
            "max_tokens": self._settings.anthropic_max_tokens,
            "system": system_prompt,
            "messages": [
                {
                    "role": "user",
                    "content": user_prompt,
                }
            ],
        }

        async with httpx.AsyncClient(timeout=self._settings.anthropic_timeout_seconds) as client:
            response = await client.post(
                self._api_url,
                headers=headers,
                json=payload,
            )
            response.raise_for_status()

        data = response.json()

        text_parts = [
            block["text"]
            for block in data.get("content", [])
            if block.get("type") == "text"
        ]
        return "\n".join(text_parts)


def _extract_json(raw_response: str) -> Any:
    """Parse JSON out of a Claude reply.

    Handles common quirks: markdown code fences, leading/trailing
    whitespace, and commentary before/after the JSON body.
    """
    text = (raw_response or "").strip()

    if text.startswith("```"):
        text = text.split("\n", 1)[-1]  # drop opening fence line
    if text.endswith("```"):
        text = text.rsplit("```", 1)[0]
    text = text.strip()

    if not text.startswith(("{", "[")):
        for opener, closer in (("{", "}"), ("[", "]")):
            start = text.find(opener)
            end = text.rfind(closer) + 1
            if start != -1 and end > start:
                text = text[start:end]
                break

    return json.loads(text)


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_analyzer: MoodAnalyzerService | None = None


def get_mood_analyzer() -> MoodAnalyzerService:
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = MoodAnalyzerService()
    return _default_analyzer
