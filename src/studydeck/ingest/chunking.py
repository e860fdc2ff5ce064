"""Split extracted document text into bounded, contiguous chunks."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List

LOGGER = logging.getLogger(__name__)

PARAGRAPH_BREAK = "\n\n"
SENTENCE_BREAK = ". "


@dataclass(frozen=True, slots=True)
class Chunk:
    """A contiguous slice ``text[start:end]`` of the source document."""

    index: int
    start: int
    end: int
    text: str

    def __len__(self) -> int:
        return self.end - self.start


def _find_break(text: str, start: int, limit: int) -> int:
    """Return the end offset of the chunk beginning at ``start``.

    The separator is kept at the end of the chunk and must lie entirely
    inside ``[start, limit)``; a break that does not move past ``start``
    falls back to the hard cut at ``limit``.
    """

    for separator in (PARAGRAPH_BREAK, SENTENCE_BREAK):
        position = text.rfind(separator, start + 1, limit)
        if position != -1:
            candidate = position + len(separator)
            if candidate > start:
                return candidate
    return limit


def iter_chunks(text: str, max_chunk_size: int) -> Iterator[Chunk]:
    """Yield chunks of at most ``max_chunk_size`` characters in document order.

    Concatenating the chunk texts reproduces ``text`` exactly. Paragraph
    breaks are preferred over sentence ends, which are preferred over a hard
    cut. An empty ``text`` yields a single empty chunk.
    """

    if max_chunk_size < 1:
        raise ValueError("max_chunk_size must be a positive integer")

    text_length = len(text)
    if text_length <= max_chunk_size:
        yield Chunk(index=0, start=0, end=text_length, text=text)
        return

    index = 0
    start = 0
    while start < text_length:
        limit = start + max_chunk_size
        if limit >= text_length:
            end = text_length
        else:
            end = _find_break(text, start, limit)
        yield Chunk(index=index, start=start, end=end, text=text[start:end])
        index += 1
        start = end


def chunk_text(text: str, max_chunk_size: int) -> List[Chunk]:
    """Materialise :func:`iter_chunks` into a list."""

    chunks = list(iter_chunks(text, max_chunk_size))
    LOGGER.debug("Split %s characters into %s chunks (max %s)", len(text), len(chunks), max_chunk_size)
    return chunks


__all__ = ["Chunk", "chunk_text", "iter_chunks"]
