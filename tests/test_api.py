"""Tests for API endpoints (no external API keys required)."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import SAMPLE_TRANSCRIPT, FakeTranscriptSource
from fastapi.testclient import TestClient

from video_qa.api.deps import get_cache, get_registry
from video_qa.api.main import app
from video_qa.errors import AuthError, RateLimitError
from video_qa.ingestion.cache import InMemoryCacheStore, load_entry
from video_qa.ingestion.sources import CaptionFileSource
from video_qa.pipeline_config import PipelineConfig
from video_qa.session import SessionRegistry, VideoSession

client = TestClient(app)


@pytest.fixture
def registry(store: InMemoryCacheStore) -> Iterator[SessionRegistry]:
    """Wire the app to an in-memory cache and a fake transcript source."""
    source = FakeTranscriptSource({"vid123": SAMPLE_TRANSCRIPT})
    config = PipelineConfig(max_chunk_chars=60, embedding_interval_seconds=0.0)

    def factory(video_id: str) -> VideoSession:
        return VideoSession(
            video_id,
            transcript_source=source,
            cache=store,
            credentials=lambda: "sk-settings",
            config=config,
        )

    sessions = SessionRegistry(factory)
    app.dependency_overrides[get_registry] = lambda: sessions
    app.dependency_overrides[get_cache] = lambda: store
    yield sessions
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_query_validation(registry: SessionRegistry):
    response = client.post("/api/videos/vid123/query", json={})
    assert response.status_code == 422  # missing required field


def test_query_top_k_bounds(registry: SessionRegistry):
    response = client.post("/api/videos/vid123/query", json={"question": "Why?", "top_k": 0})
    assert response.status_code == 422


# --- process ---


def test_process_unknown_video_returns_404(registry: SessionRegistry, embed_mock: MagicMock):
    response = client.post("/api/videos/missing/process")
    assert response.status_code == 404
    assert "No transcript available" in response.json()["detail"]
    embed_mock.assert_not_called()


def test_process_then_cache_hit(
    registry: SessionRegistry, store: InMemoryCacheStore, embed_mock: MagicMock
):
    first = client.post("/api/videos/vid123/process")
    assert first.status_code == 200
    body = first.json()
    assert body["video_id"] == "vid123"
    assert body["num_chunks"] > 1
    assert body["from_cache"] is False
    assert body["ready"] is True
    assert load_entry(store, "vid123").is_complete

    # A fresh session (e.g. after a restart) reads everything from the cache
    registry.reset()
    embed_mock.reset_mock()
    second = client.post("/api/videos/vid123/process")
    assert second.json()["from_cache"] is True
    assert second.json()["num_chunks"] == body["num_chunks"]
    embed_mock.assert_not_called()


def test_process_in_progress_returns_409(registry: SessionRegistry, embed_mock: MagicMock):
    registry.get("vid123").state.in_progress = True
    response = client.post("/api/videos/vid123/process")
    assert response.status_code == 409
    embed_mock.assert_not_called()


def test_process_auth_error_returns_401(registry: SessionRegistry, embed_mock: MagicMock):
    embed_mock.side_effect = AuthError("Incorrect API key provided", status_code=401)
    response = client.post("/api/videos/vid123/process")
    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect API key provided"


def test_process_rate_limit_returns_429(registry: SessionRegistry, embed_mock: MagicMock):
    embed_mock.side_effect = RateLimitError("Rate limit reached", status_code=429)
    response = client.post("/api/videos/vid123/process")
    assert response.status_code == 429


def test_process_missing_credential_returns_401(registry: SessionRegistry, embed_mock: MagicMock):
    registry.get("vid123").credentials = lambda: None
    response = client.post("/api/videos/vid123/process")
    assert response.status_code == 401
    assert response.json()["detail"] == "OpenAI API key not configured"


def test_bearer_credential_is_used(registry: SessionRegistry, embed_mock: MagicMock):
    response = client.post(
        "/api/videos/vid123/process", headers={"Authorization": "Bearer sk-from-header"}
    )
    assert response.status_code == 200
    assert embed_mock.call_args.kwargs["api_key"] == "sk-from-header"


# --- query ---


def test_query_returns_answer_and_sources(
    registry: SessionRegistry, embed_mock: MagicMock, answer_mock: MagicMock
):
    client.post("/api/videos/vid123/process")

    response = client.post(
        "/api/videos/vid123/query", json={"question": "Tell me about cats", "top_k": 2}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["answer"] == "Cats are mammals."
    assert len(body["sources"]) == 2
    assert "Cats" in body["sources"][0]["content"]
    similarities = [s["similarity"] for s in body["sources"]]
    assert similarities == sorted(similarities, reverse=True)


def test_query_before_processing_says_not_enough_information(
    registry: SessionRegistry, embed_mock: MagicMock, answer_mock: MagicMock
):
    response = client.post("/api/videos/vid123/query", json={"question": "Anything?"})
    assert response.status_code == 200
    assert "don't have enough information" in response.json()["answer"]
    assert response.json()["sources"] == []
    answer_mock.assert_not_called()


def test_query_blank_question_returns_422(registry: SessionRegistry):
    response = client.post("/api/videos/vid123/query", json={"question": "   "})
    assert response.status_code == 422


def test_query_generation_auth_error(
    registry: SessionRegistry, embed_mock: MagicMock, answer_mock: MagicMock
):
    client.post("/api/videos/vid123/process")
    answer_mock.side_effect = AuthError("Incorrect API key provided", status_code=401)
    response = client.post("/api/videos/vid123/query", json={"question": "Tell me about dogs"})
    assert response.status_code == 401


# --- cache ---


def test_cache_stats_and_clear(
    registry: SessionRegistry, store: InMemoryCacheStore, embed_mock: MagicMock
):
    client.post("/api/videos/vid123/process")

    stats = client.get("/api/cache").json()
    assert stats["transcripts"] == 1
    assert stats["chunk_sets"] == 1
    assert stats["embedding_sets"] == 1
    assert stats["size_bytes"] > 0

    response = client.delete("/api/cache")
    assert response.status_code == 204
    assert store.items() == {}
    assert client.get("/api/cache").json()["transcripts"] == 0
    assert not registry.get("vid123").state.ready


# --- credentials ---


def test_verify_without_key(registry: SessionRegistry):
    with patch("video_qa.api.routes.credentials.settings_credentials", return_value=None):
        response = client.post("/api/credentials/verify")
    assert response.json() == {"valid": False, "detail": "No API key provided"}


def test_verify_rejects_malformed_key(registry: SessionRegistry):
    response = client.post(
        "/api/credentials/verify", headers={"Authorization": "Bearer not-a-key"}
    )
    body = response.json()
    assert body["valid"] is False
    assert body["detail"].startswith("Invalid API key")


def test_verify_accepts_key(registry: SessionRegistry):
    with patch("video_qa.api.routes.credentials.verify_credential") as mock_verify:
        response = client.post(
            "/api/credentials/verify", headers={"Authorization": "Bearer sk-good"}
        )
    mock_verify.assert_called_once_with("sk-good")
    assert response.json() == {"valid": True, "detail": "API key is valid"}


def test_process_malformed_captions_returns_404(tmp_path: Path, store: InMemoryCacheStore):
    (tmp_path / "vid123.json").write_text(
        json.dumps({"events": [{"tStartMs": "soon", "segs": [{"utf8": "Hi"}]}]}), encoding="utf-8"
    )
    source = CaptionFileSource(tmp_path)
    sessions = SessionRegistry(
        lambda video_id: VideoSession(
            video_id, transcript_source=source, cache=store, credentials=lambda: "sk-settings"
        )
    )
    app.dependency_overrides[get_registry] = lambda: sessions
    try:
        response = client.post("/api/videos/vid123/process")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 404
    assert "Could not parse captions" in response.json()["detail"]
    assert store.items() == {}
