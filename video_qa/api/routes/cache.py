"""Cache endpoints: storage statistics and clear-all."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from video_qa.api.deps import get_cache, get_registry
from video_qa.api.models import CacheStatsResponse
from video_qa.ingestion.cache import CacheStore, cache_stats, clear_cache
from video_qa.session import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/cache", response_model=CacheStatsResponse)
def get_cache_stats(cache: CacheStore = Depends(get_cache)) -> CacheStatsResponse:
    """Report how many transcripts, chunk lists and embedding lists are cached."""
    stats = cache_stats(cache)
    return CacheStatsResponse(
        transcripts=stats.transcripts,
        chunk_sets=stats.chunk_sets,
        embedding_sets=stats.embedding_sets,
        size_bytes=stats.size_bytes,
        size_mb=round(stats.size_mb, 2),
    )


@router.delete("/api/cache", status_code=204)
def delete_cache(
    cache: CacheStore = Depends(get_cache),
    registry: SessionRegistry = Depends(get_registry),
) -> Response:
    """Clear all cached transcript and embedding data.

    Open sessions are dropped too so the next request reprocesses from scratch.
    """
    removed = clear_cache(cache)
    registry.reset()
    logger.info("Cache cleared via API (%d transcripts)", removed)
    return Response(status_code=204)
