"""
Entry Enrichment
================
Attaches sentiment, confidence, tags and insights to a freshly stored
mood entry.

    1. Skip entirely if the user opted out or wrote no reflection.
    2. If AI analysis is switched off globally, use the fallback.
    3. Otherwise ask Claude exactly once (no retries).
    4. Any failure -> deterministic fallback from the selected mood.
    5. Persist the result with a single partial update.

The entry already exists by the time this runs, so enrichment is
best-effort: AI failures and a failed analysis write are logged and
never surface to the caller.
"""

from __future__ import annotations

import logging

from moodjournal.config import Settings, get_settings
from moodjournal.db.store import MoodEntryStore, StorageError
from moodjournal.models.mood import MoodAnalysis, MoodEntry
from moodjournal.services.fallback import fallback_analysis
from moodjournal.services.mood_analyzer import MoodAnalyzerService

logger = logging.getLogger(__name__)


class MoodEnrichmentService:
    def __init__(
        self,
        store: MoodEntryStore,
        analyzer: MoodAnalyzerService,
        settings: Settings | None = None,
    ) -> None:
        self._store = store
        self._analyzer = analyzer
        self._settings = settings or get_settings()

    async def enrich(self, entry: MoodEntry) -> MoodEntry:
        """Return *entry* with analysis attached, or unchanged if skipped."""
        if not entry.wants_analysis:
            logger.debug("Skipping analysis for entry %s: disabled or no reflection", entry.id)
            return entry

        analysis = await self._analyse(entry)
        enriched = entry.with_analysis(analysis)

        try:
            stored = self._store.update_partial(entry.id, analysis.entry_fields())
        except StorageError:
            # The entry itself is already saved; only the enrichment is lost.
            logger.warning(
                "Could not store analysis for entry %s (non-blocking)",
                entry.id,
                exc_info=True,
            )
            return enriched
        if stored is None:
            # Deleted between insert and update; hand back what we computed.
            logger.warning("Entry %s vanished before analysis could be stored", entry.id)
            return enriched
        return stored

    async def _analyse(self, entry: MoodEntry) -> MoodAnalysis:
        if not self._settings.enable_ai_analysis:
            logger.debug("AI analysis disabled, using fallback for entry %s", entry.id)
            return fallback_analysis(entry.mood, entry.reflection)

        try:
            analysis = await self._analyzer.analyze(entry.reflection or "", entry.mood)
            if not isinstance(analysis, MoodAnalysis):
                # Raw payloads from other adapters still go through clamping
                analysis = MoodAnalysis.model_validate(
                    {"detectedMood": entry.mood.value, **analysis}
                )
        except Exception:
            logger.warning(
                "AI analysis failed for entry %s, using fallback (non-blocking)",
                entry.id,
                exc_info=True,
            )
            return fallback_analysis(entry.mood, entry.reflection)

        logger.info(
            "Entry %s analysed: %s (sentiment %d, confidence %d)",
            entry.id,
            analysis.detected_mood.value,
            analysis.sentiment,
            analysis.confidence,
        )
        return analysis
