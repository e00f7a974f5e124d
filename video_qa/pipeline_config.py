"""Pipeline configuration: cache backend enum and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from video_qa.config import Settings


class CacheBackend(str, Enum):
    """Available key-value stores for transcripts, chunks and embeddings."""

    MEMORY = "memory"
    FILE = "file"
    SUPABASE = "supabase"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable per-session configuration for the retrieval pipeline.

    Defaults mirror the project's settings defaults: 1000-character chunks,
    top-3 retrieval and 200ms between embedding calls.
    """

    max_chunk_chars: int = 1000
    top_k: int = 3
    embedding_interval_seconds: float = 0.2
    embedding_batch_size: int = 5
    min_transcript_chars: int = 100

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            max_chunk_chars=settings.max_chunk_chars,
            top_k=settings.top_k,
            embedding_interval_seconds=settings.embedding_interval_seconds,
            embedding_batch_size=settings.embedding_batch_size,
            min_transcript_chars=settings.min_transcript_chars,
        )
