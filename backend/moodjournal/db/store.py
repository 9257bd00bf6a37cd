"""
Mood Entry Store
================
Persistence for mood entries and motivational quotes.

Two backends share one interface:

    InMemoryMoodEntryStore   process-local dict, seeded with default quotes.
                             Used in development and tests.
    SupabaseMoodEntryStore   mood_entries / motivational_quotes tables.

Routers never touch a backend directly; they call ``get_entry_store()``,
which builds exactly one store per process from settings.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from supabase import Client, create_client

from moodjournal.config import get_settings
from moodjournal.models.mood import Mood, MoodEntry
from moodjournal.models.quote import Quote
from moodjournal.services.quotes import DEFAULT_QUOTES

logger = logging.getLogger(__name__)

# Fields update_partial() may touch. Identity, owner and creation time
# are immutable.
UPDATABLE_FIELDS = frozenset({"ai_insights", "sentiment", "confidence", "tags"})


class StorageError(Exception):
    """Raised when the storage backend fails."""


class MoodEntryStore(Protocol):
    def create(
        self,
        user_id: str,
        mood: Mood,
        reflection: Optional[str] = None,
        ai_analysis_enabled: bool = True,
    ) -> MoodEntry: ...

    def get(self, entry_id: str) -> Optional[MoodEntry]: ...

    def list_by_user(self, user_id: str, limit: int = 50) -> list[MoodEntry]: ...

    def update_partial(self, entry_id: str, fields: dict[str, Any]) -> Optional[MoodEntry]: ...

    def delete(self, entry_id: str) -> bool: ...

    def list_quotes(self) -> list[Quote]: ...


def _check_fields(fields: dict[str, Any]) -> None:
    illegal = set(fields) - UPDATABLE_FIELDS
    if illegal:
        raise ValueError(f"Fields cannot be updated: {', '.join(sorted(illegal))}")


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------

class InMemoryMoodEntryStore:
    """Dict-backed store. Not shared across processes."""

    def __init__(self, quotes: Optional[list[Quote]] = None) -> None:
        self._entries: dict[str, MoodEntry] = {}
        self._seed_quotes = DEFAULT_QUOTES if quotes is None else quotes
        self._quotes: list[Quote] = []
        self.reset()

    def reset(self) -> None:
        """Drop all entries and re-seed quotes."""
        self._entries.clear()
        self._quotes = [
            q.model_copy(update={"id": str(uuid.uuid4())}) for q in self._seed_quotes
        ]

    def create(
        self,
        user_id: str,
        mood: Mood,
        reflection: Optional[str] = None,
        ai_analysis_enabled: bool = True,
    ) -> MoodEntry:
        entry = MoodEntry(
            id=str(uuid.uuid4()),
            user_id=user_id,
            mood=mood,
            reflection=reflection,
            ai_analysis_enabled=ai_analysis_enabled,
            timestamp=datetime.now(timezone.utc),
        )
        self._entries[entry.id] = entry
        return entry

    def add(self, entry: MoodEntry) -> MoodEntry:
        """Insert a pre-built entry, keeping its id and timestamp."""
        self._entries[entry.id] = entry
        return entry

    def get(self, entry_id: str) -> Optional[MoodEntry]:
        return self._entries.get(entry_id)

    def list_by_user(self, user_id: str, limit: int = 50) -> list[MoodEntry]:
        entries = [e for e in self._entries.values() if e.user_id == user_id]
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    def update_partial(self, entry_id: str, fields: dict[str, Any]) -> Optional[MoodEntry]:
        _check_fields(fields)
        existing = self._entries.get(entry_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=fields)
        self._entries[entry_id] = updated
        return updated

    def delete(self, entry_id: str) -> bool:
        return self._entries.pop(entry_id, None) is not None

    def list_quotes(self) -> list[Quote]:
        return list(self._quotes)


# ---------------------------------------------------------------------------
# Supabase backend
# ---------------------------------------------------------------------------

class SupabaseMoodEntryStore:
    """Stores entries in the ``mood_entries`` table.

    Columns are snake_case and map 1:1 onto MoodEntry field names.
    Any client error is re-raised as StorageError so routers can map it
    to a 500 without knowing about Supabase.
    """

    ENTRIES_TABLE = "mood_entries"
    QUOTES_TABLE = "motivational_quotes"

    def __init__(self, client: Client | None = None) -> None:
        if client is None:
            # service_role key: the backend writes on behalf of users
            settings = get_settings()
            client = create_client(settings.supabase_url, settings.supabase_service_key)
        self._db = client

    def create(
        self,
        user_id: str,
        mood: Mood,
        reflection: Optional[str] = None,
        ai_analysis_enabled: bool = True,
    ) -> MoodEntry:
        insert_data = {
            "user_id": user_id,
            "mood": Mood(mood).value,
            "reflection": reflection,
            "ai_analysis_enabled": ai_analysis_enabled,
        }
        try:
            result = self._db.table(self.ENTRIES_TABLE).insert(insert_data).execute()
        except Exception as exc:
            raise StorageError("Failed to insert mood entry") from exc

        if not result.data:
            logger.error("Insert returned no rows for user %s", user_id)
            raise StorageError("Failed to insert mood entry")
        return MoodEntry.model_validate(result.data[0])

    def get(self, entry_id: str) -> Optional[MoodEntry]:
        try:
            result = (
                self._db.table(self.ENTRIES_TABLE)
                .select("*")
                .eq("id", entry_id)
                .maybe_single()
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Failed to read mood entry {entry_id}") from exc

        # maybe_single() yields None rather than an empty result on newer clients
        if not result or not result.data:
            return None
        return MoodEntry.model_validate(result.data)

    def list_by_user(self, user_id: str, limit: int = 50) -> list[MoodEntry]:
        try:
            result = (
                self._db.table(self.ENTRIES_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("timestamp", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Failed to list mood entries for {user_id}") from exc
        return [MoodEntry.model_validate(row) for row in (result.data or [])]

    def update_partial(self, entry_id: str, fields: dict[str, Any]) -> Optional[MoodEntry]:
        _check_fields(fields)
        try:
            result = (
                self._db.table(self.ENTRIES_TABLE)
                .update(fields)
                .eq("id", entry_id)
                .execute()
            )
        except Exception as exc:
            raise StorageError(f"Failed to update mood entry {entry_id}") from exc

        if not result.data:
            return None
        return MoodEntry.model_validate(result.data[0])

    def delete(self, entry_id: str) -> bool:
        try:
            result = self._db.table(self.ENTRIES_TABLE).delete().eq("id", entry_id).execute()
        except Exception as exc:
            raise StorageError(f"Failed to delete mood entry {entry_id}") from exc
        return bool(result.data)

    def list_quotes(self) -> list[Quote]:
        try:
            result = self._db.table(self.QUOTES_TABLE).select("*").execute()
        except Exception as exc:
            raise StorageError("Failed to list quotes") from exc
        return [Quote.model_validate(row) for row in (result.data or [])]


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_default_store: MoodEntryStore | None = None


def get_entry_store() -> MoodEntryStore:
    global _default_store
    if _default_store is None:
        backend = get_settings().storage_backend
        if backend == "supabase":
            _default_store = SupabaseMoodEntryStore()
        else:
            _default_store = InMemoryMoodEntryStore()
        logger.info("Using %s mood entry store", backend)
    return _default_store


def reset_entry_store() -> None:
    """Forget the process store. Tests call this between cases."""
    global _default_store
    _default_store = None
