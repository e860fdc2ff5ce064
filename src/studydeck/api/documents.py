"""API router for flashcard generation and document summaries."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from studydeck.api.errors import failure_to_http
from studydeck.api.schemas import (
    CollectionOut,
    DocumentOut,
    GenerationResponse,
    SummaryResponse,
    TextGenerationRequest,
    UploadSummaryResponse,
)
from studydeck.errors import GenerationFailure
from studydeck.ingest.format_detection import is_supported_media_type
from studydeck.models import GenerationOptions
from studydeck.services.documents import (
    DocumentService,
    GenerationOutcome,
    InvalidRequestError,
    NotFoundError,
    TextTooLongError,
    get_document_service,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])

UNSUPPORTED_TYPE_MESSAGE = "Unsupported file type. Only PDF and Word documents are allowed."


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


async def _read_upload(document: UploadFile, service: DocumentService) -> bytes:
    if not is_supported_media_type(document.content_type):
        raise HTTPException(status_code=415, detail=UNSUPPORTED_TYPE_MESSAGE)
    data = await document.read()
    limit = service.settings.max_upload_bytes
    if len(data) > limit:
        raise HTTPException(status_code=413, detail=f"File exceeds the {limit} byte upload limit")
    return data


def _generation_response(outcome: GenerationOutcome) -> GenerationResponse:
    return GenerationResponse(
        collection=CollectionOut.model_validate(outcome.collection),
        document=DocumentOut.model_validate(outcome.document),
        flashcards_count=outcome.flashcards_count,
    )


@router.post("/documents/upload", response_model=GenerationResponse, status_code=201)
async def upload_document(
    document: UploadFile = File(...),
    title: str = Form(""),
    description: str = Form(""),
    generate_definitions: str = Form("true", alias="generateDefinitions"),
    generate_concepts: str = Form("true", alias="generateConcepts"),
    include_multiple_choice: str = Form("true", alias="includeMultipleChoice"),
    service: DocumentService = Depends(get_document_service),
) -> GenerationResponse:
    """Create a collection of flashcards generated from an uploaded document."""

    if not title.strip():
        raise HTTPException(status_code=400, detail="Collection title is required")
    data = await _read_upload(document, service)
    options = GenerationOptions(
        generate_definitions=_flag(generate_definitions),
        generate_concepts=_flag(generate_concepts),
        include_multiple_choice=_flag(include_multiple_choice),
    )

    try:
        outcome = await service.create_from_upload(
            data,
            document.filename or "document",
            document.content_type or "",
            title,
            description,
            options,
        )
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except GenerationFailure as failure:
        raise failure_to_http(failure) from failure
    return _generation_response(outcome)


@router.post("/generate-from-text", response_model=GenerationResponse, status_code=201)
async def generate_from_text(
    payload: TextGenerationRequest,
    service: DocumentService = Depends(get_document_service),
) -> GenerationResponse:
    """Create a collection of flashcards from pasted text."""

    try:
        outcome = await service.create_from_text(payload.text, payload.title, payload.description)
    except TextTooLongError as exc:
        raise HTTPException(
            status_code=400, detail={"message": str(exc), "wordCount": exc.word_count}
        ) from exc
    except InvalidRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except GenerationFailure as failure:
        raise failure_to_http(failure) from failure
    return _generation_response(outcome)


@router.post("/summarize", response_model=UploadSummaryResponse)
async def summarize_upload(
    document: UploadFile = File(...),
    service: DocumentService = Depends(get_document_service),
) -> UploadSummaryResponse:
    data = await _read_upload(document, service)
    try:
        outcome = await service.summarize_upload(
            data, document.filename or "document", document.content_type or ""
        )
    except GenerationFailure as failure:
        raise failure_to_http(failure) from failure
    return UploadSummaryResponse(
        summary=outcome.summary,
        file_name=outcome.file_name,
        file_size=outcome.file_size,
        word_count=outcome.word_count,
        summary_word_count=outcome.summary_word_count,
    )


@router.post("/documents/{document_id}/summarize", response_model=SummaryResponse)
async def summarize_document(
    document_id: int,
    document: UploadFile = File(...),
    service: DocumentService = Depends(get_document_service),
) -> SummaryResponse:
    """Summarise a stored document from a re-uploaded copy of its file."""

    data = await _read_upload(document, service)
    try:
        summary = await service.summarize_document(
            document_id, data, document.content_type or "", document.filename
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except GenerationFailure as failure:
        raise failure_to_http(failure) from failure
    return SummaryResponse(summary=summary)
