"""
Mood Entries Router
===================
POST   /api/v1/mood-entries        Log a mood (+ optional reflection)
GET    /api/v1/mood-entries        List the user's entries, newest first
GET    /api/v1/mood-entries/{id}   Fetch one entry
DELETE /api/v1/mood-entries/{id}   Delete one entry

Creating an entry runs the full pipeline synchronously:

    1. Validate the payload (invalid mood -> 400, nothing stored)
    2. Store the entry with all derived fields empty
    3. IF aiAnalysisEnabled AND reflection provided -> analyse it
       (Claude, or the deterministic fallback if that fails)
    4. Return the enriched entry

If analysis fails for any reason the entry still succeeds with
fallback-derived values. Only storage failures produce a 500.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from moodjournal.config import get_settings
from moodjournal.db.store import get_entry_store
from moodjournal.models.mood import MoodEntry, MoodEntryCreate
from moodjournal.routers.identity import current_user_id
from moodjournal.services.enrichment import MoodEnrichmentService
from moodjournal.services.mood_analyzer import get_mood_analyzer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/mood-entries", tags=["mood-entries"])


def _get_owned_entry(entry_id: str, user_id: str) -> MoodEntry:
    """Fetch *entry_id*, treating another user's entry as missing."""
    entry = get_entry_store().get(entry_id)
    if entry is None or entry.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Mood entry not found", "code": "entry_not_found"},
        )
    return entry


@router.get(
    "",
    response_model=list[MoodEntry],
    summary="List mood entries",
)
async def list_mood_entries(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    user_id: str = Depends(current_user_id),
) -> list[MoodEntry]:
    settings = get_settings()
    return get_entry_store().list_by_user(user_id, limit or settings.entries_default_limit)


@router.post(
    "",
    response_model=MoodEntry,
    status_code=status.HTTP_201_CREATED,
    summary="Log a mood entry",
    description=(
        "Record a mood with an optional reflection. If AI analysis is "
        "enabled and a reflection is provided, the response already "
        "carries sentiment, confidence, tags and insights."
    ),
    responses={
        201: {"description": "Entry created (and analysed, if eligible)"},
        400: {"description": "Invalid mood or malformed payload"},
        500: {"description": "Storage failure"},
    },
)
async def create_mood_entry(
    body: MoodEntryCreate,
    user_id: str = Depends(current_user_id),
) -> MoodEntry:
    store = get_entry_store()

    entry = store.create(
        user_id=user_id,
        mood=body.mood,
        reflection=body.reflection,
        ai_analysis_enabled=body.ai_analysis_enabled,
    )
    logger.info("Created mood entry %s (%s) for user %s", entry.id, entry.mood.value, user_id)

    enricher = MoodEnrichmentService(
        store=store,
        analyzer=get_mood_analyzer(),
        settings=get_settings(),
    )
    return await enricher.enrich(entry)


@router.get(
    "/{entry_id}",
    response_model=MoodEntry,
    summary="Fetch a mood entry",
    responses={404: {"description": "Entry not found"}},
)
async def get_mood_entry(
    entry_id: str,
    user_id: str = Depends(current_user_id),
) -> MoodEntry:
    return _get_owned_entry(entry_id, user_id)


@router.delete(
    "/{entry_id}",
    summary="Delete a mood entry",
    responses={404: {"description": "Entry not found"}},
)
async def delete_mood_entry(
    entry_id: str,
    user_id: str = Depends(current_user_id),
) -> dict:
    _get_owned_entry(entry_id, user_id)

    if not get_entry_store().delete(entry_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Mood entry not found", "code": "entry_not_found"},
        )

    logger.info("Deleted mood entry %s for user %s", entry_id, user_id)
    return {"success": True}
