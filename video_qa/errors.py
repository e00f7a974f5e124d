"""Exception taxonomy for transcript processing and question answering."""

from __future__ import annotations


class VideoQAError(Exception):
    """Base exception for all video Q&A errors."""


class NotAvailableError(VideoQAError):
    """Raised when a source has no usable transcript."""


class MissingCredentialError(VideoQAError):
    """Raised when no API credential is configured."""


class ServiceError(VideoQAError):
    """Base exception for failed calls to the embedding or generation provider.

    ``message`` carries the provider's own error message when one was returned.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(ServiceError):
    """Raised when the provider rejects the credential."""


class RateLimitError(ServiceError):
    """Raised when the provider signals throttling."""


class NetworkError(ServiceError):
    """Raised on transport failure or timeout."""


class ProviderError(ServiceError):
    """Raised for any other non-success or malformed provider response."""


class DimensionMismatchError(VideoQAError, ValueError):
    """Raised when two vectors being compared differ in length."""


class EmptyContextError(VideoQAError):
    """Raised when an answer is requested without any retrieved chunks."""
