"""Credential endpoint: check an OpenAI API key before using it."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from video_qa.api.deps import get_request_credential
from video_qa.api.models import VerifyCredentialResponse
from video_qa.errors import AuthError, ServiceError
from video_qa.openai_client import settings_credentials, verify_credential

router = APIRouter()


@router.post("/api/credentials/verify", response_model=VerifyCredentialResponse)
def verify(api_key: str | None = Depends(get_request_credential)) -> VerifyCredentialResponse:
    """Verify the request's ``Bearer`` key, or the configured key if none is sent."""
    key = api_key or settings_credentials()
    if not key:
        return VerifyCredentialResponse(valid=False, detail="No API key provided")

    try:
        verify_credential(key)
    except AuthError as exc:
        return VerifyCredentialResponse(valid=False, detail=f"Invalid API key: {exc.message}")
    except ServiceError as exc:
        return VerifyCredentialResponse(valid=False, detail=f"Could not verify API key: {exc.message}")

    return VerifyCredentialResponse(valid=True, detail="API key is valid")
