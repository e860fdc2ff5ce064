"""Generation services built on top of the ingest and LLM layers."""

from .documents import DocumentService, SummaryOutcome, TextTooLongError, get_document_service
from .flashcards import AssemblyReport, AssemblyStatus, FlashcardAssembler
from .summary import SummaryReducer

__all__ = [
    "AssemblyReport",
    "AssemblyStatus",
    "DocumentService",
    "FlashcardAssembler",
    "SummaryOutcome",
    "SummaryReducer",
    "TextTooLongError",
    "get_document_service",
]
