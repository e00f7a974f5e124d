"""Pydantic request/response schemas for the Video Q&A API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProcessResponse(BaseModel):
    """Response body for the /api/videos/{id}/process endpoint."""

    video_id: str
    num_chunks: int
    from_cache: bool
    ready: bool


class QueryRequest(BaseModel):
    """Request body for the /api/videos/{id}/query endpoint."""

    question: str
    top_k: int | None = Field(default=None, ge=1, le=20)


class SourceChunk(BaseModel):
    """A single retrieved transcript chunk with its similarity score."""

    index: int
    content: str
    similarity: float


class QueryResponse(BaseModel):
    """Response body for the /api/videos/{id}/query endpoint."""

    answer: str
    sources: list[SourceChunk]


class CacheStatsResponse(BaseModel):
    """Response body for GET /api/cache."""

    transcripts: int
    chunk_sets: int
    embedding_sets: int
    size_bytes: int
    size_mb: float


class VerifyCredentialResponse(BaseModel):
    """Response body for POST /api/credentials/verify."""

    valid: bool
    detail: str
