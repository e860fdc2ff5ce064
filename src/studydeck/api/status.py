"""API router reporting whether the upstream credential is usable."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from studydeck.api.schemas import StatusResponse
from studydeck.errors import FailureKind, GenerationFailure
from studydeck.services.documents import DocumentService, get_document_service

router = APIRouter(prefix="/api/status", tags=["status"])

API_KEY_PREFIX = "sk-"
MIN_API_KEY_LENGTH = 40


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


@router.get("/openai", response_model=StatusResponse)
async def openai_status(service: DocumentService = Depends(get_document_service)):
    """Check the configured key's format, then confirm it with a ``models.list`` call."""

    api_key = service.settings.openai_api_key
    if not api_key:
        return _error(400, "OpenAI API key is not configured")
    if not api_key.startswith(API_KEY_PREFIX) or len(api_key) < MIN_API_KEY_LENGTH:
        return _error(400, "Invalid API key format. OpenAI API keys should start with 'sk-'")

    try:
        await service.assembler.client.check_credentials()
    except GenerationFailure as failure:
        status_code = 401 if "401" in failure.message else 500
        if failure.kind is FailureKind.QUOTA_EXCEEDED:
            status_code = 429
        return _error(status_code, f"OpenAI API error: {failure.message}")
    return StatusResponse(status="ok", message="OpenAI API key is valid")
