"""Cosine-similarity ranking of cached chunks against a query embedding."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from video_qa.errors import DimensionMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarityResult:
    """A chunk scored against a query; derived per query, never persisted."""

    index: int
    text: str
    similarity: float


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two vectors of equal length.

    Returns ``0.0`` when either vector has zero magnitude. That is a
    convention rather than a mathematical result, kept so degenerate vectors
    rank below anything with positive similarity.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(a) != len(b):
        msg = f"Vector dimensions must match: {len(a)} != {len(b)}"
        raise DimensionMismatchError(msg)

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def rank_chunks(
    query_embedding: Sequence[float],
    embeddings: Sequence[Sequence[float]],
    chunks: Sequence[str],
) -> list[SimilarityResult]:
    """Score every chunk and sort by similarity, highest first.

    Ties keep their original index order.

    Raises:
        ValueError: If *chunks* and *embeddings* differ in length.
        DimensionMismatchError: If any embedding differs in length from the query.
    """
    if len(chunks) != len(embeddings):
        msg = f"Got {len(chunks)} chunks but {len(embeddings)} embeddings"
        raise ValueError(msg)

    results = [
        SimilarityResult(index=i, text=chunks[i], similarity=cosine_similarity(query_embedding, emb))
        for i, emb in enumerate(embeddings)
    ]
    # list.sort is stable, so equal scores stay in index order
    results.sort(key=lambda r: r.similarity, reverse=True)
    return results


def find_relevant_chunks(
    query_embedding: Sequence[float],
    embeddings: Sequence[Sequence[float]],
    chunks: Sequence[str],
    top_k: int = 3,
) -> list[SimilarityResult]:
    """Return the *top_k* most similar chunks for a query embedding."""
    top = rank_chunks(query_embedding, embeddings, chunks)[:top_k]
    logger.debug("Top similarity scores: %s", [round(r.similarity, 4) for r in top])
    return top
