"""End-to-end ingestion pipeline: cache check -> extract -> chunk -> embed -> store."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

import httpx

from video_qa.config import settings
from video_qa.errors import NotAvailableError
from video_qa.ingestion.cache import CacheStore, load_entry, save_embeddings, save_transcript
from video_qa.ingestion.chunking import chunk_text
from video_qa.ingestion.embeddings import EmbeddingScheduler, get_embedding
from video_qa.ingestion.models import CacheEntry, EmbeddingProgress
from video_qa.ingestion.sources import TranscriptSource
from video_qa.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    """Outcome of one processing pass."""

    entry: CacheEntry
    cache_hit: bool
    embedding_calls: int


def _log_status(message: str) -> None:
    logger.info(message)


def ingest_source(
    source_id: str,
    *,
    source: TranscriptSource,
    store: CacheStore,
    api_key: str,
    config: PipelineConfig | None = None,
    on_status: Callable[[str], None] | None = None,
    on_progress: Callable[[EmbeddingProgress], None] | None = None,
    http_client: httpx.Client | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> IngestResult:
    """Make sure *source_id* has a transcript, chunks and embeddings cached.

    Cache policy:

    - transcript and a full set of embeddings cached: nothing is recomputed
      (chunks are re-derived from the transcript if they were not cached);
    - transcript cached but embeddings missing or inconsistent with the
      chunks: extraction is skipped and every chunk is re-embedded;
    - nothing cached: extract, chunk, embed, then cache transcript, chunks
      and embeddings together.

    Nothing is written until every chunk has been embedded, so a failed pass
    leaves the cache exactly as it was.

    Args:
        source_id: Video id (or any stable source key).
        source: Where to extract the transcript from on a cache miss.
        store: Cache store shared across sessions.
        api_key: OpenAI credential for the embedding calls.
        config: Chunking/pacing knobs; defaults to settings.
        on_status: Receives human-readable status lines.
        on_progress: Receives an :class:`EmbeddingProgress` after each call.
        http_client: Optional pre-configured httpx client.
        sleep: Used for pacing between embedding calls.

    Returns:
        The cached entry, whether it was a full cache hit, and the number of
        embedding calls made.

    Raises:
        NotAvailableError: If the source has no usable transcript.
        AuthError, RateLimitError, NetworkError, ProviderError
    """
    config = config or PipelineConfig.from_settings(settings)
    status = on_status or _log_status

    status("Checking for cached data...")
    entry = load_entry(store, source_id)

    if entry is not None:
        rechunked = not entry.chunks
        if rechunked:
            entry.chunks = chunk_text(entry.transcript, config.max_chunk_chars)
        if entry.is_complete:
            logger.info("Cache hit for %s", source_id)
            status("Loading from cache...")
            return IngestResult(entry=entry, cache_hit=True, embedding_calls=0)

        logger.info("Partial cache hit for %s; recomputing embeddings", source_id)
        entry.embeddings = None
        write_transcript = rechunked
    else:
        logger.info("Cache miss for %s", source_id)
        status("Extracting transcript...")
        transcript = source.extract(source_id).strip()
        if len(transcript) < config.min_transcript_chars:
            raise NotAvailableError("Transcript appears to be empty or too short for analysis")

        chunks = chunk_text(transcript, config.max_chunk_chars)
        write_transcript = True
        entry = CacheEntry(source_id=source_id, transcript=transcript, chunks=chunks)
        status(f"Transcript extracted: {len(chunks)} chunks created")

    def report(progress: EmbeddingProgress) -> None:
        status(f"Generating embeddings... {progress.completed}/{progress.total}")
        if on_progress is not None:
            on_progress(progress)

    status("Generating embeddings...")
    scheduler = EmbeddingScheduler(
        partial(get_embedding, api_key=api_key, http_client=http_client),
        min_interval=config.embedding_interval_seconds,
        batch_size=config.embedding_batch_size,
        on_progress=report,
        sleep=sleep,
    )
    embeddings = scheduler.run(entry.chunks)

    # Nothing is written until every chunk has an embedding
    if write_transcript:
        save_transcript(store, source_id, entry.transcript, entry.chunks)
    save_embeddings(store, source_id, embeddings)
    entry.embeddings = embeddings
    return IngestResult(entry=entry, cache_hit=False, embedding_calls=len(embeddings))
