"""
Tests for /api/v1/mood-entries
==============================
Covers:
- Happy path: mood-only entry (no analysis, derived fields null)
- Happy path: reflection + AI analysis attached to the 201 response
- AI opt-out: aiAnalysisEnabled=false skips analysis
- Empty / whitespace reflection: treated as no reflection
- AI failure: adapter raises -> 201 with fallback-derived values
- AI kill switch: fallback used, adapter never called
- Analysis write fails after the entry is stored -> still 201, no duplicate
- Clamping: out-of-range sentiment / confidence stored in range
- Validation: invalid mood, missing mood, malformed JSON -> 400, nothing stored
- Round trip: create then list returns the same id / mood / reflection,
  including an empty reflection
- Fetch by id, other users' entries hidden
- Delete: success, then 404
- Storage failure -> 500
- Wrong method -> 405

Run: pytest tests/test_mood_entries.py -v
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from moodjournal.config import Settings
from moodjournal.db.store import InMemoryMoodEntryStore, StorageError
from moodjournal.main import app
from moodjournal.models.mood import Insight, Mood, MoodAnalysis
from moodjournal.services.mood_analyzer import MoodAnalysisError

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_MOCK_ANALYSIS = MoodAnalysis(
    detected_mood=Mood.ANXIOUS,
    sentiment=2,
    confidence=88,
    insights=[
        Insight(
            type="pattern",
            title="Deadline pressure",
            description="Work deadlines seem to drive your anxiety.",
            confidence=80,
            actionable=True,
        )
    ],
    suggested_tags=["work", "deadlines"],
    emotional_intensity=7,
)

_URL = "/api/v1/mood-entries"


def _mock_analyzer(
    result: Optional[MoodAnalysis] = None,
    error: Optional[Exception] = None,
) -> MagicMock:
    analyzer = MagicMock()
    if error is not None:
        analyzer.analyze = AsyncMock(side_effect=error)
    else:
        analyzer.analyze = AsyncMock(return_value=result or _MOCK_ANALYSIS)
    return analyzer


@contextmanager
def _client(
    store: InMemoryMoodEntryStore,
    analyzer: Optional[MagicMock] = None,
    settings: Optional[Settings] = None,
) -> Iterator[TestClient]:
    """TestClient with the store, analyzer and settings swapped out."""
    with (
        patch("moodjournal.routers.mood_entries.get_entry_store", return_value=store),
        patch(
            "moodjournal.routers.mood_entries.get_mood_analyzer",
            return_value=analyzer or _mock_analyzer(),
        ),
        patch(
            "moodjournal.routers.mood_entries.get_settings",
            return_value=settings or Settings(enable_ai_analysis=True),
        ),
    ):
        yield TestClient(app)


@pytest.fixture
def store() -> InMemoryMoodEntryStore:
    return InMemoryMoodEntryStore()


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

class TestCreateHappyPath:

    def test_mood_only_entry(self, store):
        analyzer = _mock_analyzer()
        with _client(store, analyzer) as client:
            resp = client.post(_URL, json={"mood": "happy"})

        assert resp.status_code == 201
        data = resp.json()
        assert data["mood"] == "happy"
        assert data["userId"] == "demo-user"
        assert data["reflection"] is None
        assert data["sentiment"] is None
        assert data["confidence"] is None
        assert data["aiInsights"] is None
        assert data["tags"] is None
        analyzer.analyze.assert_not_called()

    def test_reflection_with_ai_analysis(self, store):
        analyzer = _mock_analyzer()
        with _client(store, analyzer) as client:
            resp = client.post(
                _URL,
                json={
                    "mood": "anxious",
                    "reflection": "Worried about the deadline",
                    "aiAnalysisEnabled": True,
                },
            )

        assert resp.status_code == 201
        data = resp.json()
        assert data["sentiment"] == 2
        assert data["confidence"] == 88
        assert data["tags"] == ["work", "deadlines"]
        assert data["aiInsights"]["detectedMood"] == "anxious"
        assert data["aiInsights"]["insights"][0]["title"] == "Deadline pressure"
        analyzer.analyze.assert_awaited_once_with("Worried about the deadline", Mood.ANXIOUS)

        # The stored copy matches the response
        stored = store.get(data["id"])
        assert stored.sentiment == 2
        assert stored.tags == ["work", "deadlines"]

    def test_ai_defaults_to_enabled(self, store):
        analyzer = _mock_analyzer()
        with _client(store, analyzer) as client:
            resp = client.post(_URL, json={"mood": "sad", "reflection": "Long week"})

        assert resp.status_code == 201
        analyzer.analyze.assert_awaited_once()

    def test_snake_case_payload_accepted(self, store):
        analyzer = _mock_analyzer()
        with _client(store, analyzer) as client:
            resp = client.post(
                _URL,
                json={"mood": "sad", "reflection": "hmm", "ai_analysis_enabled": False},
            )

        assert resp.status_code == 201
        assert resp.json()["aiAnalysisEnabled"] is False
        analyzer.analyze.assert_not_called()

    def test_user_header_sets_owner(self, store):
        with _client(store) as client:
            resp = client.post(_URL, json={"mood": "neutral"}, headers={"X-User-Id": "alice"})

        assert resp.json()["userId"] == "alice"


class TestAnalysisSkipped:

    def test_ai_disabled_on_entry(self, store):
        analyzer = _mock_analyzer()
        with _client(store, analyzer) as client:
            resp = client.post(
                _URL,
                json={"mood": "angry", "reflection": "Traffic was awful", "aiAnalysisEnabled": False},
            )

        assert resp.status_code == 201
        data = resp.json()
        assert data["reflection"] == "Traffic was awful"
        assert data["sentiment"] is None
        assert data["confidence"] is None
        assert data["aiInsights"] is None
        analyzer.analyze.assert_not_called()

    @pytest.mark.parametrize("reflection", ["", "   ", None])
    def test_empty_reflection(self, store, reflection):
        analyzer = _mock_analyzer()
        with _client(store, analyzer) as client:
            resp = client.post(_URL, json={"mood": "happy", "reflection": reflection})

        assert resp.status_code == 201
        assert resp.json()["sentiment"] is None
        analyzer.analyze.assert_not_called()


class TestAnalysisFailure:

    @pytest.mark.parametrize(
        "error",
        [
            MoodAnalysisError("Claude API call failed"),
            RuntimeError("unexpected"),
            TimeoutError("took too long"),
        ],
    )
    def test_adapter_failure_falls_back(self, store, error):
        analyzer = _mock_analyzer(error=error)
        with _client(store, analyzer) as client:
            resp = client.post(_URL, json={"mood": "excited", "reflection": "Got the job!"})

        assert resp.status_code == 201
        data = resp.json()
        assert data["sentiment"] == 5
        assert data["confidence"] == 75
        assert data["tags"] == ["general", "wellness"]
        assert data["aiInsights"]["insights"][0]["type"] == "suggestion"
        analyzer.analyze.assert_awaited_once()

    def test_kill_switch_uses_fallback_without_calling_ai(self, store):
        analyzer = _mock_analyzer()
        with _client(store, analyzer, settings=Settings(enable_ai_analysis=False)) as client:
            resp = client.post(_URL, json={"mood": "angry", "reflection": "So annoyed"})

        assert resp.status_code == 201
        data = resp.json()
        assert data["sentiment"] == 1
        assert data["confidence"] == 75
        analyzer.analyze.assert_not_called()

    @pytest.mark.parametrize("analysis_error", [None, RuntimeError("adapter down")])
    def test_failed_analysis_write_still_creates(self, store, analysis_error):
        store.update_partial = MagicMock(side_effect=StorageError("update down"))
        analyzer = _mock_analyzer(error=analysis_error) if analysis_error else _mock_analyzer()
        with _client(store, analyzer) as client:
            resp = client.post(_URL, json={"mood": "happy", "reflection": "hi"})

        assert resp.status_code == 201
        data = resp.json()
        assert data["sentiment"] is not None
        store.update_partial.assert_called_once()

        # The entry itself was saved exactly once
        saved = store.list_by_user("demo-user")
        assert [e.id for e in saved] == [data["id"]]
        assert saved[0].reflection == "hi"

    def test_raw_payload_out_of_range_is_clamped(self, store):
        analyzer = MagicMock()
        analyzer.analyze = AsyncMock(
            return_value={"sentiment": 9, "confidence": -10, "suggestedTags": list("abcdefg")}
        )
        with _client(store, analyzer) as client:
            resp = client.post(_URL, json={"mood": "happy", "reflection": "Best day ever"})

        assert resp.status_code == 201
        data = resp.json()
        assert data["sentiment"] == 5
        assert data["confidence"] == 0
        assert data["tags"] == ["a", "b", "c", "d", "e"]
        assert data["aiInsights"]["detectedMood"] == "happy"


class TestValidation:

    @pytest.mark.parametrize(
        "payload",
        [
            {"mood": "ecstatic"},
            {"mood": ""},
            {"reflection": "no mood given"},
            {"mood": 3},
            {"mood": "happy", "reflection": "x" * 5001},
        ],
    )
    def test_invalid_payload_rejected(self, store, payload):
        with _client(store) as client:
            resp = client.post(_URL, json=payload)

        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "invalid_payload"
        assert store.list_by_user("demo-user") == []

    def test_malformed_json_rejected(self, store):
        with _client(store) as client:
            resp = client.post(
                _URL,
                content=b"{not json",
                headers={"content-type": "application/json"},
            )

        assert resp.status_code == 400
        assert store.list_by_user("demo-user") == []


# ---------------------------------------------------------------------------
# Reading & deleting
# ---------------------------------------------------------------------------

class TestReadAndDelete:

    def test_round_trip(self, store):
        with _client(store) as client:
            created = client.post(
                _URL, json={"mood": "sad", "reflection": "Missing home", "aiAnalysisEnabled": False}
            ).json()
            listed = client.get(_URL).json()

        assert len(listed) == 1
        assert listed[0]["id"] == created["id"]
        assert listed[0]["mood"] == "sad"
        assert listed[0]["reflection"] == "Missing home"

    def test_round_trip_keeps_empty_reflection(self, store):
        with _client(store) as client:
            created = client.post(_URL, json={"mood": "neutral", "reflection": ""}).json()
            fetched = client.get(f"{_URL}/{created['id']}").json()

        assert created["reflection"] == ""
        assert fetched["reflection"] == ""

    def test_list_newest_first_with_limit(self, store):
        with _client(store) as client:
            ids = [client.post(_URL, json={"mood": m}).json()["id"] for m in ("happy", "sad", "angry")]
            listed = client.get(_URL, params={"limit": 2}).json()

        assert [e["id"] for e in listed] == ids[::-1][:2]

    def test_list_only_own_entries(self, store):
        with _client(store) as client:
            client.post(_URL, json={"mood": "happy"}, headers={"X-User-Id": "alice"})
            client.post(_URL, json={"mood": "sad"}, headers={"X-User-Id": "bob"})
            listed = client.get(_URL, headers={"X-User-Id": "alice"}).json()

        assert [e["mood"] for e in listed] == ["happy"]

    def test_invalid_limit(self, store):
        with _client(store) as client:
            assert client.get(_URL, params={"limit": "abc"}).status_code == 400

    def test_get_by_id(self, store):
        with _client(store) as client:
            created = client.post(_URL, json={"mood": "neutral"}).json()
            resp = client.get(f"{_URL}/{created['id']}")

        assert resp.status_code == 200
        assert resp.json()["id"] == created["id"]

    def test_get_missing(self, store):
        with _client(store) as client:
            resp = client.get(f"{_URL}/does-not-exist")

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "entry_not_found"

    def test_other_users_entry_is_not_found(self, store):
        with _client(store) as client:
            created = client.post(_URL, json={"mood": "happy"}, headers={"X-User-Id": "alice"}).json()
            resp = client.get(f"{_URL}/{created['id']}", headers={"X-User-Id": "bob"})
            delete = client.delete(f"{_URL}/{created['id']}", headers={"X-User-Id": "bob"})

        assert resp.status_code == 404
        assert delete.status_code == 404
        assert store.get(created["id"]) is not None

    def test_delete(self, store):
        with _client(store) as client:
            created = client.post(_URL, json={"mood": "happy"}).json()
            first = client.delete(f"{_URL}/{created['id']}")
            second = client.delete(f"{_URL}/{created['id']}")

        assert first.status_code == 200
        assert first.json() == {"success": True}
        assert second.status_code == 404
        assert store.get(created["id"]) is None


class TestErrors:

    def test_storage_failure_is_500(self):
        broken = MagicMock()
        broken.create.side_effect = StorageError("db down")
        with _client(broken) as client:
            resp = client.post(_URL, json={"mood": "happy"})

        assert resp.status_code == 500
        assert resp.json()["detail"]["code"] == "storage_error"

    def test_wrong_method(self, store):
        with _client(store) as client:
            assert client.put(_URL, json={"mood": "happy"}).status_code == 405
            assert client.post(f"{_URL}/some-id", json={}).status_code == 405
