"""Map domain exceptions onto HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException

from video_qa.errors import (
    AuthError,
    MissingCredentialError,
    NetworkError,
    NotAvailableError,
    ProviderError,
    RateLimitError,
    VideoQAError,
)

_STATUS_CODES: list[tuple[type[VideoQAError], int]] = [
    (MissingCredentialError, 401),
    (AuthError, 401),
    (NotAvailableError, 404),
    (RateLimitError, 429),
    (ProviderError, 502),
    (NetworkError, 503),
]


def to_http_exception(exc: VideoQAError) -> HTTPException:
    """Return the HTTPException to raise for *exc* (500 if unmapped)."""
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
