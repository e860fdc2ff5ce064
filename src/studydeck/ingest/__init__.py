"""Document text extraction and chunking."""

from .chunking import Chunk, chunk_text, iter_chunks
from .extractors import DocxExtractor, PDFExtractor, extract_text
from .format_detection import (
    SUPPORTED_MEDIA_TYPES,
    DocumentFormat,
    DocumentFormatDetector,
    is_supported_media_type,
)

__all__ = [
    "Chunk",
    "DocumentFormat",
    "DocumentFormatDetector",
    "DocxExtractor",
    "PDFExtractor",
    "SUPPORTED_MEDIA_TYPES",
    "chunk_text",
    "extract_text",
    "is_supported_media_type",
    "iter_chunks",
]
