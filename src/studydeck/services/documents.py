"""Orchestration of document uploads, text input and summaries against storage."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from studydeck.config import Settings, get_settings
from studydeck.errors import ExtractionFailure, GenerationFailure, describe_failure
from studydeck.ingest.extractors import extract_text
from studydeck.ingest.format_detection import DocumentFormatDetector
from studydeck.llm.client import GenerationClient
from studydeck.logging_config import AUDIT_LOGGER_NAME
from studydeck.models import GenerationOptions
from studydeck.services.flashcards import FlashcardAssembler
from studydeck.services.summary import SummaryReducer
from studydeck.storage import Collection, Document, InMemoryStorage, QuizSession, get_storage
from studydeck.telemetry import emit_exception, traced_duration

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)

TEXT_MEDIA_TYPE = "text/plain"
NO_TEXT_MESSAGE = "No text could be extracted from the document"


class InvalidRequestError(ValueError):
    """Raised when caller supplied input is rejected before any generation."""


class TextTooLongError(InvalidRequestError):
    def __init__(self, word_count: int, limit: int) -> None:
        super().__init__(f"Text exceeds maximum allowed length of {limit} words")
        self.word_count = word_count
        self.limit = limit


class NotFoundError(LookupError):
    """Raised when a referenced collection or document does not exist."""


def count_words(text: str) -> int:
    return len(text.split())


@dataclass(slots=True)
class GenerationOutcome:
    """Result of turning a document or text into a persisted collection."""

    collection: Collection
    document: Document
    flashcards_count: int


@dataclass(slots=True)
class SummaryOutcome:
    summary: str
    file_name: str
    file_size: int
    word_count: int
    summary_word_count: int


class DocumentService:
    """Run the extraction and generation pipeline and persist its results.

    Generation is all-or-nothing: when the assembler raises, the collection
    created for the run is removed again and no flashcards are stored.
    """

    def __init__(
        self,
        *,
        storage: InMemoryStorage | None = None,
        assembler: FlashcardAssembler | None = None,
        reducer: SummaryReducer | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.storage = storage or get_storage()
        if assembler is None or reducer is None:
            client = GenerationClient(self.settings)
            assembler = assembler or FlashcardAssembler(
                client,
                chunk_size=self.settings.flashcard_chunk_chars,
                max_concurrency=self.settings.max_concurrency,
                timeout=self.settings.generation_timeout_seconds,
            )
            reducer = reducer or SummaryReducer(
                client,
                chunk_size=self.settings.summary_chunk_chars,
                max_concurrency=self.settings.max_concurrency,
                timeout=self.settings.generation_timeout_seconds,
            )
        self.assembler = assembler
        self.reducer = reducer
        self.detector = DocumentFormatDetector()

    def _extract(self, data: bytes, media_type: str, file_name: str | None) -> str:
        document_format = self.detector.detect(media_type, file_name)
        with traced_duration(
            "extraction", logger=LOGGER, file_name=file_name, size_bytes=len(data), format=document_format.value
        ):
            text = extract_text(data, document_format, file_name)
        if not text.strip():
            raise ExtractionFailure(NO_TEXT_MESSAGE)
        return text

    async def _generate_into(
        self,
        collection: Collection,
        text: str,
        options: GenerationOptions,
    ) -> int:
        started = time.perf_counter()
        try:
            candidates = await self.assembler.generate(text, options)
        except GenerationFailure as failure:
            emit_exception(
                module=f"{__name__}.generate",
                error=failure,
                suggestion=describe_failure(failure),
            )
            self.storage.delete_collection(collection.id)
            raise

        saved = self.storage.create_flashcards(candidates, collection.id)
        AUDIT_LOGGER.info(
            {
                "event": "generation",
                "collection_id": collection.id,
                "flashcards": len(saved),
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 3),
            }
        )
        return len(saved)

    def _record_generation(self, collection: Collection, count: int, *, source: str) -> None:
        self.storage.create_activity(
            "generation",
            f'Generated {count} flashcards {source}for "{collection.title}"',
            entity_id=collection.id,
            entity_type="collection",
        )

    async def create_from_upload(
        self,
        data: bytes,
        file_name: str,
        media_type: str,
        title: str,
        description: str | None = None,
        options: GenerationOptions | None = None,
    ) -> GenerationOutcome:
        if not title or not title.strip():
            raise InvalidRequestError("Collection title is required")

        collection = self.storage.create_collection(title, description or "")
        document = self.storage.create_document(file_name, len(data), media_type, collection.id)
        LOGGER.info("Processing upload %s (%s bytes) into collection %s", file_name, len(data), collection.id)

        try:
            text = self._extract(data, media_type, file_name)
        except ExtractionFailure:
            self.storage.delete_collection(collection.id)
            raise

        count = await self._generate_into(collection, text, options or GenerationOptions())
        # Activities only describe runs that were kept.
        self.storage.create_activity(
            "upload",
            f'Uploaded "{file_name}"',
            entity_id=document.id,
            entity_type="document",
        )
        self._record_generation(collection, count, source="")
        return GenerationOutcome(collection=collection, document=document, flashcards_count=count)

    async def create_from_text(
        self, text: str, title: str, description: str | None = None
    ) -> GenerationOutcome:
        if not text or not text.strip():
            raise InvalidRequestError("Text content is required")
        if not title or not title.strip():
            raise InvalidRequestError("Collection title is required")
        word_count = count_words(text)
        if word_count > self.settings.max_text_words:
            raise TextTooLongError(word_count, self.settings.max_text_words)

        collection = self.storage.create_collection(title, description or "")
        count = await self._generate_into(collection, text, GenerationOptions())
        self._record_generation(collection, count, source="from manual text input ")
        document = self.storage.create_document(
            f"text_input_{datetime.now(timezone.utc).isoformat()}",
            len(text.encode("utf-8")),
            TEXT_MEDIA_TYPE,
            collection.id,
        )
        return GenerationOutcome(collection=collection, document=document, flashcards_count=count)

    async def summarize_upload(self, data: bytes, file_name: str, media_type: str) -> SummaryOutcome:
        text = self._extract(data, media_type, file_name)
        summary = await self.reducer.summarize(text)
        return SummaryOutcome(
            summary=summary,
            file_name=file_name,
            file_size=len(data),
            word_count=count_words(text),
            summary_word_count=count_words(summary),
        )

    async def summarize_document(
        self, document_id: int, data: bytes, media_type: str, file_name: Optional[str] = None
    ) -> str:
        """Summarise a re-uploaded copy of a stored document."""

        document = self.storage.get_document(document_id)
        if document is None:
            raise NotFoundError("Document not found")
        if self.storage.get_collection(document.collection_id) is None:
            raise NotFoundError("Collection not found")

        text = self._extract(data, media_type, file_name or document.file_name)
        summary = await self.reducer.summarize(text)
        self.storage.create_activity(
            "summarize",
            f'Generated summary for "{document.file_name}"',
            entity_id=document.id,
            entity_type="document",
        )
        return summary

    def record_quiz(self, collection_id: int, score: int, total_questions: int) -> QuizSession:
        collection = self.storage.get_collection(collection_id)
        if collection is None:
            raise NotFoundError("Collection not found")
        session = self.storage.create_quiz_session(collection_id, score, total_questions)
        self.storage.create_activity(
            "quiz",
            f'Scored {score}/{total_questions} in "{collection.title}" quiz',
            entity_id=session.id,
            entity_type="quiz",
        )
        return session


@lru_cache()
def get_document_service() -> DocumentService:
    """FastAPI dependency returning the shared :class:`DocumentService` instance."""

    return DocumentService()


def reset_document_service_cache() -> None:
    get_document_service.cache_clear()  # type: ignore[attr-defined]


__all__ = [
    "DocumentService",
    "GenerationOutcome",
    "InvalidRequestError",
    "NotFoundError",
    "SummaryOutcome",
    "TextTooLongError",
    "count_words",
    "get_document_service",
    "reset_document_service_cache",
]
