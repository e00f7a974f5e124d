"""Embedding helpers using OpenAI text-embedding-3-small."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import httpx

from video_qa.config import settings
from video_qa.errors import ProviderError
from video_qa.ingestion.models import EmbeddingProgress
from video_qa.openai_client import get_openai_client, translate_errors

logger = logging.getLogger(__name__)


def get_embedding(
    text: str,
    api_key: str,
    *,
    model: str | None = None,
    max_input_chars: int | None = None,
    http_client: httpx.Client | None = None,
) -> list[float]:
    """Embed a single text using the OpenAI embeddings API.

    Input is truncated to *max_input_chars* (default 8000) to stay under the
    model's token limit.

    Args:
        text: String to embed.
        api_key: Caller-supplied OpenAI credential.
        model: Embedding model name; defaults to ``settings.embedding_model``.
        max_input_chars: Truncation ceiling; defaults to settings.
        http_client: Optional pre-configured httpx client.

    Returns:
        The embedding vector.

    Raises:
        AuthError, RateLimitError, NetworkError, ProviderError
    """
    limit = max_input_chars if max_input_chars is not None else settings.max_embedding_input_chars
    client = get_openai_client(api_key, http_client=http_client)

    with translate_errors("Embedding request"):
        response = client.embeddings.create(
            model=model or settings.embedding_model,
            input=text[:limit],
            encoding_format="float",
        )

    if not response.data:
        raise ProviderError("Embedding response contained no data")
    return list(response.data[0].embedding)


class EmbeddingScheduler:
    """Drain a queue of texts through *embed*, one call at a time.

    Consecutive calls start at least *min_interval* seconds apart. Progress is
    reported after every completed call; ``batch`` groups items in runs of
    *batch_size* for display only and does not change how calls are made.
    """

    def __init__(
        self,
        embed: Callable[[str], list[float]],
        *,
        min_interval: float = 0.2,
        batch_size: int = 5,
        on_progress: Callable[[EmbeddingProgress], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if batch_size <= 0:
            msg = f"batch_size must be positive, got {batch_size}"
            raise ValueError(msg)
        self._embed = embed
        self.min_interval = min_interval
        self.batch_size = batch_size
        self._on_progress = on_progress
        self._sleep = sleep
        self._clock = clock
        self._last_started: float | None = None

    def _wait_turn(self) -> None:
        if self._last_started is not None:
            wait = self.min_interval - (self._clock() - self._last_started)
            if wait > 0:
                self._sleep(wait)
        self._last_started = self._clock()

    def run(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts* in order and return one vector per text.

        The first failure stops the drain and propagates; nothing partial is
        returned.
        """
        total = len(texts)
        embeddings: list[list[float]] = []

        for index, text in enumerate(texts):
            self._wait_turn()
            embeddings.append(self._embed(text))

            progress = EmbeddingProgress(
                completed=index + 1,
                total=total,
                batch=index // self.batch_size,
            )
            logger.debug("Embedded chunk %d/%d", progress.completed, total)
            if self._on_progress is not None:
                self._on_progress(progress)

        return embeddings
