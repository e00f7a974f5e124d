"""OpenAI client construction and translation of SDK errors."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import httpx
import openai
from openai import OpenAI

from video_qa.config import settings
from video_qa.errors import AuthError, NetworkError, ProviderError, RateLimitError

logger = logging.getLogger(__name__)

CredentialProvider = Callable[[], str | None]


def get_openai_client(api_key: str, http_client: httpx.Client | None = None) -> OpenAI:
    """Create an OpenAI client for a caller-supplied credential.

    SDK retries are disabled: each call maps to exactly one request.
    """
    return OpenAI(
        api_key=api_key,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
        max_retries=0,
        http_client=http_client,
    )


def settings_credentials() -> str | None:
    """Credential provider backed by ``OPENAI_API_KEY``."""
    return settings.openai_api_key or None


def _provider_message(exc: openai.APIStatusError) -> str:
    """Prefer the provider's ``error.message`` over the SDK's summary."""
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return exc.message


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise OpenAI SDK exceptions as :mod:`video_qa.errors` types."""
    try:
        yield
    except openai.AuthenticationError as exc:
        raise AuthError(_provider_message(exc), status_code=exc.status_code) from exc
    except openai.RateLimitError as exc:
        raise RateLimitError(_provider_message(exc), status_code=exc.status_code) from exc
    except openai.APIConnectionError as exc:
        # Includes APITimeoutError
        raise NetworkError(f"{operation} failed: {exc}") from exc
    except openai.APIStatusError as exc:
        logger.warning("%s failed with HTTP %s", operation, exc.status_code)
        raise ProviderError(_provider_message(exc), status_code=exc.status_code) from exc
    except openai.APIError as exc:
        raise ProviderError(f"{operation} failed: {exc.message}") from exc


def verify_credential(api_key: str, http_client: httpx.Client | None = None) -> None:
    """Check that *api_key* is accepted by the provider.

    Keys without the ``sk-`` prefix are rejected locally, before any request.

    Raises:
        AuthError: If the key is malformed or rejected.
        RateLimitError, NetworkError, ProviderError: On other failures.
    """
    if not api_key.startswith("sk-"):
        raise AuthError('API key should start with "sk-"')

    client = get_openai_client(api_key, http_client=http_client)
    with translate_errors("Credential check"):
        client.models.list()
