"""Shared fixtures: in-memory cache, fake transcript source, fake embeddings."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock, patch

import httpx
import pytest

from video_qa.errors import NotAvailableError
from video_qa.ingestion.cache import InMemoryCacheStore
from video_qa.pipeline_config import PipelineConfig

SAMPLE_TRANSCRIPT = (
    "Cats are mammals that like to sleep. Dogs are loyal mammals too. "
    "Fish live in water and breathe through gills. Birds can fly over the sea. "
    "Cats and dogs are common pets."
)


class FakeTranscriptSource:
    """Serves transcripts from a dict and counts extractions."""

    def __init__(self, transcripts: dict[str, str]) -> None:
        self.transcripts = transcripts
        self.calls: list[str] = []

    def extract(self, source_id: str) -> str:
        self.calls.append(source_id)
        if source_id not in self.transcripts:
            raise NotAvailableError(f"No transcript available for {source_id}")
        return self.transcripts[source_id]


def fake_embedding(text: str, api_key: str = "", **kwargs: Any) -> list[float]:
    """Deterministic 3-D 'embedding' from keyword counts."""
    lowered = text.lower()
    return [
        lowered.count("cat") + 0.1,
        lowered.count("dog") + 0.1,
        lowered.count("fish") + 0.1,
    ]


@pytest.fixture
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def source() -> FakeTranscriptSource:
    return FakeTranscriptSource({"vid123": SAMPLE_TRANSCRIPT})


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(max_chunk_chars=60, embedding_interval_seconds=0.0)


@pytest.fixture
def embed_mock() -> Iterator[MagicMock]:
    """Patch every module that calls the embeddings API with one fake."""
    mock = MagicMock(side_effect=fake_embedding)
    with (
        patch("video_qa.ingestion.pipeline.get_embedding", mock),
        patch("video_qa.session.get_embedding", mock),
    ):
        yield mock


@pytest.fixture
def answer_mock() -> Iterator[MagicMock]:
    mock = MagicMock(return_value="Cats are mammals.")
    with patch("video_qa.session.generate_answer", mock):
        yield mock


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """httpx client whose requests are answered by *handler*."""
    return httpx.Client(transport=httpx.MockTransport(handler))


def embedding_response(vector: list[float]) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "object": "list",
            "data": [{"object": "embedding", "index": 0, "embedding": vector}],
            "model": "text-embedding-3-small",
            "usage": {"prompt_tokens": 3, "total_tokens": 3},
        },
    )


def error_response(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"error": {"message": message, "type": "invalid_request_error", "code": None}},
    )


def request_json(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)
