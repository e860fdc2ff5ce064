"""Assemble flashcard candidates for a whole document, one model call per chunk."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import List, Optional

from studydeck.config import DEFAULT_FLASHCARD_CHUNK_CHARS
from studydeck.errors import GenerationFailure
from studydeck.ingest.chunking import chunk_text
from studydeck.llm.client import GenerationClient
from studydeck.models import FlashcardCandidate, GenerationOptions
from studydeck.prompt_builder import build_flashcard_prompt
from studydeck.services.fanout import gather_ordered, gather_settled
from studydeck.telemetry import emit_pipeline_event

LOGGER = logging.getLogger(__name__)


class AssemblyStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(slots=True)
class ChunkFailure:
    """Failure recorded for the chunk at ``index``."""

    index: int
    failure: GenerationFailure


@dataclass(slots=True)
class AssemblyReport:
    """Outcome of :meth:`FlashcardAssembler.generate_report`."""

    status: AssemblyStatus
    candidates: List[FlashcardCandidate] = field(default_factory=list)
    failures: List[ChunkFailure] = field(default_factory=list)
    chunk_count: int = 0


class FlashcardAssembler:
    """Chunk a document, query the model per chunk and merge the candidates.

    Results are ordered by chunk position regardless of the order in which
    the concurrent upstream calls complete.
    """

    def __init__(
        self,
        client: GenerationClient,
        *,
        chunk_size: int = DEFAULT_FLASHCARD_CHUNK_CHARS,
        max_concurrency: int = 4,
        timeout: Optional[float] = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be a positive integer")
        self._client = client
        self.chunk_size = chunk_size
        self.max_concurrency = max_concurrency
        self.timeout = timeout

    @property
    def client(self) -> GenerationClient:
        return self._client

    async def generate(
        self, text: str, options: Optional[GenerationOptions] = None
    ) -> List[FlashcardCandidate]:
        """Return every chunk's candidates in chunk order, or raise the first failure."""

        self._client.ensure_configured()
        chunks = chunk_text(text, self.chunk_size)
        prompt = build_flashcard_prompt(options or GenerationOptions())
        started = time.perf_counter()
        emit_pipeline_event("flashcards.start", task="flashcards", chunks=len(chunks), text_len=len(text))

        try:
            per_chunk = await gather_ordered(
                [partial(self._client.generate_flashcards, chunk.text, prompt) for chunk in chunks],
                max_concurrency=self.max_concurrency,
                timeout=self.timeout,
            )
        except GenerationFailure as failure:
            emit_pipeline_event(
                "flashcards.failed",
                task="flashcards",
                chunks=len(chunks),
                duration_ms=(time.perf_counter() - started) * 1000.0,
                failure_kind=failure.kind.value,
            )
            raise

        candidates = [candidate for batch in per_chunk for candidate in batch]
        emit_pipeline_event(
            "flashcards.complete",
            task="flashcards",
            chunks=len(chunks),
            items=len(candidates),
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return candidates

    async def generate_report(
        self, text: str, options: Optional[GenerationOptions] = None
    ) -> AssemblyReport:
        """Process every chunk and report successes alongside per-chunk failures.

        A configuration failure or a timeout still raises, since neither is
        tied to a single chunk.
        """

        self._client.ensure_configured()
        chunks = chunk_text(text, self.chunk_size)
        prompt = build_flashcard_prompt(options or GenerationOptions())

        outcomes = await gather_settled(
            [partial(self._client.generate_flashcards, chunk.text, prompt) for chunk in chunks],
            max_concurrency=self.max_concurrency,
            timeout=self.timeout,
        )

        report = AssemblyReport(status=AssemblyStatus.COMPLETE, chunk_count=len(chunks))
        for chunk, outcome in zip(chunks, outcomes):
            if isinstance(outcome, GenerationFailure):
                report.failures.append(ChunkFailure(index=chunk.index, failure=outcome))
            else:
                report.candidates.extend(outcome)

        if report.failures:
            succeeded = len(chunks) - len(report.failures)
            report.status = AssemblyStatus.PARTIAL if succeeded else AssemblyStatus.FAILED
            LOGGER.warning(
                "Flashcard generation failed for %s of %s chunks", len(report.failures), len(chunks)
            )
        return report


__all__ = ["AssemblyReport", "AssemblyStatus", "ChunkFailure", "FlashcardAssembler"]
