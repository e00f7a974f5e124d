"""Key-value cache for transcripts, chunks and embeddings.

Entries are stored under three keys per source id (``transcript_<id>``,
``chunks_<id>``, ``embeddings_<id>``) in any :class:`CacheStore`.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, cast

from supabase import Client, create_client

from video_qa.config import settings
from video_qa.ingestion.models import CacheEntry, CacheStats
from video_qa.pipeline_config import CacheBackend

logger = logging.getLogger(__name__)

TRANSCRIPT_PREFIX = "transcript_"
CHUNKS_PREFIX = "chunks_"
EMBEDDINGS_PREFIX = "embeddings_"


class CacheStore(Protocol):
    """Minimal key-value store interface consumed by the pipeline."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def clear(self) -> None: ...

    def items(self) -> dict[str, Any]: ...


class InMemoryCacheStore:
    """Process-local store; contents are lost on exit."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()

    def items(self) -> dict[str, Any]:
        return dict(self._data)


class JsonFileCacheStore:
    """Whole-mapping JSON document on disk, rewritten atomically on every set."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            msg = f"Cache file {self.path} does not contain a JSON object"
            raise ValueError(msg)
        return data

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Any | None:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def clear(self) -> None:
        self._save({})

    def items(self) -> dict[str, Any]:
        return self._load()


class SupabaseCacheStore:
    """One row per key in a Supabase table with ``key`` (text, primary key)
    and ``value`` (jsonb) columns."""

    def __init__(self, client: Client, table: str = "transcript_cache") -> None:
        self.client = client
        self.table = table

    def get(self, key: str) -> Any | None:
        result = self.client.table(self.table).select("value").eq("key", key).execute()
        rows = cast(list[dict[str, Any]], result.data)
        return rows[0]["value"] if rows else None

    def set(self, key: str, value: Any) -> None:
        self.client.table(self.table).upsert({"key": key, "value": value}).execute()

    def clear(self) -> None:
        # PostgREST refuses unfiltered deletes; match every key instead
        self.client.table(self.table).delete().neq("key", "").execute()

    def items(self) -> dict[str, Any]:
        result = self.client.table(self.table).select("key,value").execute()
        rows = cast(list[dict[str, Any]], result.data)
        return {row["key"]: row["value"] for row in rows}


def cache_keys(source_id: str) -> tuple[str, str, str]:
    """Return the ``(transcript, chunks, embeddings)`` keys for *source_id*."""
    return (
        f"{TRANSCRIPT_PREFIX}{source_id}",
        f"{CHUNKS_PREFIX}{source_id}",
        f"{EMBEDDINGS_PREFIX}{source_id}",
    )


def load_entry(store: CacheStore, source_id: str) -> CacheEntry | None:
    """Read the cached entry for *source_id*.

    Returns ``None`` when no transcript is cached. ``chunks`` is an empty list
    when only the transcript was stored; callers recompute them.
    """
    transcript_key, chunks_key, embeddings_key = cache_keys(source_id)
    transcript = store.get(transcript_key)
    if not transcript:
        return None

    return CacheEntry(
        source_id=source_id,
        transcript=transcript,
        chunks=list(store.get(chunks_key) or []),
        embeddings=store.get(embeddings_key) or None,
    )


def save_transcript(store: CacheStore, source_id: str, transcript: str, chunks: list[str]) -> None:
    transcript_key, chunks_key, _ = cache_keys(source_id)
    store.set(transcript_key, transcript)
    store.set(chunks_key, chunks)
    logger.info("Cached transcript for %s (%d chunks)", source_id, len(chunks))


def save_embeddings(store: CacheStore, source_id: str, embeddings: list[list[float]]) -> None:
    _, _, embeddings_key = cache_keys(source_id)
    store.set(embeddings_key, embeddings)
    logger.info("Cached %d embeddings for %s", len(embeddings), source_id)


def clear_cache(store: CacheStore) -> int:
    """Remove every cached entry and return how many transcripts were dropped."""
    removed = cache_stats(store).transcripts
    store.clear()
    logger.info("Cleared cache (%d transcripts)", removed)
    return removed


def cache_stats(store: CacheStore) -> CacheStats:
    """Count cached entries by kind and estimate their serialized size."""
    data = store.items()
    keys = list(data.keys())
    return CacheStats(
        transcripts=sum(1 for k in keys if k.startswith(TRANSCRIPT_PREFIX)),
        chunk_sets=sum(1 for k in keys if k.startswith(CHUNKS_PREFIX)),
        embedding_sets=sum(1 for k in keys if k.startswith(EMBEDDINGS_PREFIX)),
        size_bytes=len(json.dumps(data)),
    )


def get_cache_store(backend: str | None = None) -> CacheStore:
    """Build the configured cache store.

    Args:
        backend: ``"memory"``, ``"file"`` or ``"supabase"``; defaults to
            ``settings.cache_backend``.
    """
    choice = CacheBackend(backend) if backend is not None else settings.cache_backend

    if choice is CacheBackend.MEMORY:
        return InMemoryCacheStore()
    if choice is CacheBackend.SUPABASE:
        client = create_client(settings.supabase_url, settings.supabase_key)
        return SupabaseCacheStore(client, table=settings.supabase_cache_table)
    return JsonFileCacheStore(settings.cache_path)
