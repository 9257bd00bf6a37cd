"""
Quotes Router
=============
GET  /api/v1/quotes/random?mood=happy   Random seed quote suited to a mood
POST /api/v1/quotes/personalized        Claude-written quote for a mood
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from moodjournal.config import get_settings
from moodjournal.db.store import get_entry_store
from moodjournal.models.quote import PersonalizedQuoteRequest, Quote
from moodjournal.services.fallback import fallback_quote
from moodjournal.services.mood_analyzer import get_mood_analyzer
from moodjournal.services.quotes import select_quote

router = APIRouter(prefix="/api/v1/quotes", tags=["quotes"])


@router.get(
    "/random",
    response_model=Quote,
    summary="Random motivational quote",
    description="Quotes not matching the mood are only used if none match.",
    responses={404: {"description": "No quotes available"}},
)
async def get_random_quote(mood: Optional[str] = Query(default=None)) -> Quote:
    quote = select_quote(get_entry_store().list_quotes(), mood)
    if quote is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "No quotes found", "code": "quote_not_found"},
        )
    return quote


@router.post(
    "/personalized",
    response_model=Quote,
    summary="Personalised motivational quote",
    responses={400: {"description": "Mood missing or invalid"}},
)
async def create_personalized_quote(body: PersonalizedQuoteRequest) -> Quote:
    if get_settings().enable_ai_analysis:
        quote = await get_mood_analyzer().personalized_quote(body.mood, body.recent_reflections)
    else:
        quote = fallback_quote(body.mood)
    return quote.model_copy(update={"id": quote.id or str(uuid.uuid4())})
