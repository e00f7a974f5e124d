"""Data models for the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CaptionSegment:
    """Uniform representation of a single caption cue."""

    text: str
    start_time: float | None = None
    end_time: float | None = None


@dataclass
class CacheEntry:
    """Everything cached for one source: transcript, chunks and embeddings.

    ``embeddings`` is ``None`` until every chunk has been embedded; when present
    it holds exactly one vector per chunk, at the same index.
    """

    source_id: str
    transcript: str
    chunks: list[str]
    embeddings: list[list[float]] | None = None

    @property
    def is_complete(self) -> bool:
        return self.embeddings is not None and len(self.embeddings) == len(self.chunks)


@dataclass(frozen=True)
class EmbeddingProgress:
    """Progress report emitted after each embedding call."""

    completed: int
    total: int
    batch: int

    @property
    def percent(self) -> float:
        return 100.0 * self.completed / self.total if self.total else 100.0


@dataclass(frozen=True)
class CacheStats:
    """Summary of what the cache store currently holds."""

    transcripts: int
    chunk_sets: int
    embedding_sets: int
    size_bytes: int

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)
