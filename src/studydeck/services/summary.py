"""Two-level map/reduce summarisation of long documents."""
from __future__ import annotations

import time
from functools import partial
from typing import List, Optional

from studydeck.config import DEFAULT_SUMMARY_CHUNK_CHARS
from studydeck.errors import GenerationFailure
from studydeck.ingest.chunking import Chunk, chunk_text
from studydeck.llm.client import GenerationClient
from studydeck.prompt_builder import (
    FINAL_SUMMARY_WORD_LIMIT,
    PARTIAL_SUMMARY_WORD_LIMIT,
    build_summary_prompt,
)
from studydeck.services.fanout import gather_ordered, run_with_timeout
from studydeck.telemetry import emit_pipeline_event

PARTIAL_SUMMARY_SEPARATOR = "\n\n"


class SummaryReducer:
    """Summarise a document, reducing per-chunk partial summaries when needed."""

    def __init__(
        self,
        client: GenerationClient,
        *,
        chunk_size: int = DEFAULT_SUMMARY_CHUNK_CHARS,
        max_concurrency: int = 4,
        timeout: Optional[float] = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be a positive integer")
        self._client = client
        self.chunk_size = chunk_size
        self.max_concurrency = max_concurrency
        self.timeout = timeout

    async def summarize(self, text: str) -> str:
        """Return a summary of roughly ``FINAL_SUMMARY_WORD_LIMIT`` words.

        A text spanning several chunks is summarised chunk by chunk with the
        tighter partial limit; the partial summaries are joined in chunk order
        and summarised once more.
        """

        self._client.ensure_configured()
        chunks = chunk_text(text, self.chunk_size)
        started = time.perf_counter()
        emit_pipeline_event("summary.start", task="summary", chunks=len(chunks), text_len=len(text))

        try:
            summary = await run_with_timeout(self._reduce(chunks), self.timeout)
        except GenerationFailure as failure:
            emit_pipeline_event(
                "summary.failed",
                task="summary",
                chunks=len(chunks),
                duration_ms=(time.perf_counter() - started) * 1000.0,
                failure_kind=failure.kind.value,
            )
            raise

        emit_pipeline_event(
            "summary.complete",
            task="summary",
            chunks=len(chunks),
            items=1,
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return summary

    async def _reduce(self, chunks: List[Chunk]) -> str:
        final_prompt = build_summary_prompt(FINAL_SUMMARY_WORD_LIMIT, is_partial=False)
        if len(chunks) == 1:
            return await self._client.generate_summary(chunks[0].text, final_prompt, is_partial=False)

        partial_prompt = build_summary_prompt(PARTIAL_SUMMARY_WORD_LIMIT, is_partial=True)
        partials = await gather_ordered(
            [
                partial(self._client.generate_summary, chunk.text, partial_prompt, is_partial=True)
                for chunk in chunks
            ],
            max_concurrency=self.max_concurrency,
        )
        combined = PARTIAL_SUMMARY_SEPARATOR.join(partials)
        return await self._client.generate_summary(combined, final_prompt, is_partial=False)


__all__ = ["SummaryReducer"]
