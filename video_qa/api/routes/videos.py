"""Video endpoints: process a transcript and answer questions about it."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from video_qa.api.deps import get_registry, get_request_credential
from video_qa.api.errors import to_http_exception
from video_qa.api.models import ProcessResponse, QueryRequest, QueryResponse, SourceChunk
from video_qa.errors import VideoQAError
from video_qa.session import SessionRegistry

router = APIRouter()


# Plain ``def`` handlers: processing blocks on paced embedding calls, so
# FastAPI runs these in its threadpool instead of on the event loop.
@router.post("/api/videos/{video_id}/process", response_model=ProcessResponse)
def process_video(
    video_id: str,
    registry: SessionRegistry = Depends(get_registry),
    api_key: str | None = Depends(get_request_credential),
) -> ProcessResponse:
    """Extract, chunk and embed a video's transcript, reusing the cache when possible."""
    session = registry.get(video_id)

    try:
        started = session.process(api_key=api_key)
    except VideoQAError as exc:
        raise to_http_exception(exc) from exc

    if not started:
        raise HTTPException(status_code=409, detail="Processing already in progress")

    state = session.state
    return ProcessResponse(
        video_id=video_id,
        num_chunks=len(state.chunks),
        from_cache=state.loaded_from_cache,
        ready=state.ready,
    )


@router.post("/api/videos/{video_id}/query", response_model=QueryResponse)
def query_video(
    video_id: str,
    request: QueryRequest,
    registry: SessionRegistry = Depends(get_registry),
    api_key: str | None = Depends(get_request_credential),
) -> QueryResponse:
    """Answer a question using the video's most relevant transcript chunks.

    The video must have been processed first; otherwise the answer says there
    is not enough information.
    """
    session = registry.get(video_id)

    try:
        answer = session.ask(request.question, top_k=request.top_k, api_key=api_key)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except VideoQAError as exc:
        raise to_http_exception(exc) from exc

    return QueryResponse(
        answer=answer.text,
        sources=[
            SourceChunk(index=r.index, content=r.text, similarity=r.similarity)
            for r in answer.sources
        ],
    )
