"""Shared FastAPI dependencies: cache store, session registry and credentials."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Header

from video_qa.config import settings
from video_qa.ingestion.cache import CacheStore, get_cache_store
from video_qa.ingestion.sources import CaptionFileSource
from video_qa.openai_client import settings_credentials
from video_qa.session import SessionRegistry, VideoSession


@lru_cache(maxsize=1)
def get_cache() -> CacheStore:
    return get_cache_store()


@lru_cache(maxsize=1)
def get_registry() -> SessionRegistry:
    source = CaptionFileSource(settings.transcripts_dir)
    cache = get_cache()

    def factory(video_id: str) -> VideoSession:
        return VideoSession(
            video_id,
            transcript_source=source,
            cache=cache,
            credentials=settings_credentials,
        )

    return SessionRegistry(factory)


def get_request_credential(authorization: str | None = Header(default=None)) -> str | None:
    """Pass through a ``Bearer`` credential from the request, if any.

    Returns ``None`` when absent so the session falls back to settings.
    """
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[len("bearer ") :].strip() or None
    return None
