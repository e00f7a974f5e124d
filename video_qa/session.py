"""Per-video session: processing state, in-progress guard and question answering."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock

import httpx

from video_qa.config import settings
from video_qa.errors import EmptyContextError, MissingCredentialError, VideoQAError
from video_qa.ingestion.cache import CacheStore
from video_qa.ingestion.embeddings import get_embedding
from video_qa.ingestion.models import EmbeddingProgress
from video_qa.ingestion.pipeline import ingest_source
from video_qa.ingestion.sources import TranscriptSource
from video_qa.openai_client import CredentialProvider
from video_qa.pipeline_config import PipelineConfig
from video_qa.retrieval.generation import INSUFFICIENT_CONTEXT_ANSWER, generate_answer
from video_qa.retrieval.search import SimilarityResult, find_relevant_chunks

logger = logging.getLogger(__name__)

READY_STATUS = "Ready! Ask questions about this video."


@dataclass
class SessionState:
    """Everything known about the video currently being processed."""

    source_id: str
    transcript: str | None = None
    chunks: list[str] = field(default_factory=list)
    embeddings: list[list[float]] = field(default_factory=list)
    loaded_from_cache: bool = False
    in_progress: bool = False

    @property
    def ready(self) -> bool:
        return bool(self.embeddings) and len(self.embeddings) == len(self.chunks)


@dataclass
class Answer:
    """Generated answer plus the excerpts it was grounded on."""

    text: str
    sources: list[SimilarityResult] = field(default_factory=list)


def _log_status(message: str) -> None:
    logger.info(message)


class VideoSession:
    """Process one video's transcript and answer questions about it.

    A session owns a single :class:`SessionState`. When the source changes,
    the state is replaced rather than mutated, so nothing from the previous
    video leaks into the next.
    """

    def __init__(
        self,
        source_id: str,
        *,
        transcript_source: TranscriptSource,
        cache: CacheStore,
        credentials: CredentialProvider,
        config: PipelineConfig | None = None,
        on_status: Callable[[str], None] | None = None,
        on_progress: Callable[[EmbeddingProgress], None] | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.state = SessionState(source_id=source_id)
        self.transcript_source = transcript_source
        self.cache = cache
        self.credentials = credentials
        self.config = config or PipelineConfig.from_settings(settings)
        self.on_status = on_status or _log_status
        self.on_progress = on_progress
        self.http_client = http_client
        self._sleep = sleep
        self._lock = Lock()

    @property
    def source_id(self) -> str:
        return self.state.source_id

    def _require_credential(self, override: str | None = None) -> str:
        api_key = override or self.credentials()
        if not api_key:
            raise MissingCredentialError("OpenAI API key not configured")
        return api_key

    def on_source_changed(self, new_id: str) -> None:
        """Start over with a fresh state when the active source changes."""
        with self._lock:
            if new_id and new_id != self.state.source_id:
                logger.info("Source changed from %s to %s", self.state.source_id, new_id)
                self.state = SessionState(source_id=new_id)

    def process(self, api_key: str | None = None) -> bool:
        """Load the transcript, chunks and embeddings for the current source.

        *api_key* overrides the session's credential provider for this pass.

        Returns:
            ``False`` without doing anything if a pass is already running,
            ``True`` once the session is ready for questions.

        Raises:
            MissingCredentialError, NotAvailableError, AuthError,
            RateLimitError, NetworkError, ProviderError
        """
        with self._lock:
            state = self.state
            if state.in_progress:
                return False
            state.in_progress = True

        try:
            api_key = self._require_credential(api_key)
            result = ingest_source(
                state.source_id,
                source=self.transcript_source,
                store=self.cache,
                api_key=api_key,
                config=self.config,
                on_status=self.on_status,
                on_progress=self.on_progress,
                http_client=self.http_client,
                sleep=self._sleep,
            )
        except VideoQAError as exc:
            logger.warning("Processing %s failed: %s", state.source_id, exc)
            self.on_status(f"Error: {exc}")
            raise
        finally:
            state.in_progress = False

        entry = result.entry
        state.transcript = entry.transcript
        state.chunks = list(entry.chunks)
        state.embeddings = list(entry.embeddings or [])
        state.loaded_from_cache = result.cache_hit
        self.on_status(READY_STATUS)
        return True

    def ask(self, question: str, top_k: int | None = None, api_key: str | None = None) -> Answer:
        """Answer *question* from the most relevant transcript chunks.

        Without a processed corpus the insufficient-information answer is
        returned and no remote call is made.

        Raises:
            ValueError: If *question* is blank.
            MissingCredentialError, AuthError, RateLimitError, NetworkError,
            ProviderError
        """
        question = question.strip()
        if not question:
            raise ValueError("Question must not be empty")

        state = self.state
        if not state.ready:
            return Answer(text=INSUFFICIENT_CONTEXT_ANSWER)

        try:
            api_key = self._require_credential(api_key)
            self.on_status("Finding relevant content...")
            query_embedding = get_embedding(question, api_key, http_client=self.http_client)
            results = find_relevant_chunks(
                query_embedding,
                state.embeddings,
                state.chunks,
                top_k=top_k if top_k is not None else self.config.top_k,
            )

            self.on_status("Generating answer...")
            try:
                text = generate_answer(question, results, api_key, http_client=self.http_client)
            except EmptyContextError:
                return Answer(text=INSUFFICIENT_CONTEXT_ANSWER)
        except VideoQAError as exc:
            logger.warning("Query on %s failed: %s", state.source_id, exc)
            self.on_status(f"Error: {exc}")
            raise

        self.on_status("Ready! Ask another question.")
        return Answer(text=text, sources=results)


class SessionRegistry:
    """One :class:`VideoSession` per source id, created on first use."""

    def __init__(self, factory: Callable[[str], VideoSession]) -> None:
        self._factory = factory
        self._sessions: dict[str, VideoSession] = {}
        self._lock = Lock()

    def get(self, source_id: str) -> VideoSession:
        with self._lock:
            session = self._sessions.get(source_id)
            if session is None:
                session = self._factory(source_id)
                self._sessions[source_id] = session
            return session

    def reset(self) -> None:
        """Forget every session, e.g. after the cache was cleared."""
        with self._lock:
            self._sessions.clear()
