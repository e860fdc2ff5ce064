"""Extractors turning PDF and Word byte buffers into plain text."""
from __future__ import annotations

import io
import logging
import re
from typing import List, Optional

from docx import Document as load_docx
from pdfminer.high_level import extract_pages
from pdfminer.layout import LTTextContainer

from studydeck.errors import ExtractionFailure

from .format_detection import DocumentFormat, DocumentFormatDetector

LOGGER = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

PAGE_SEPARATOR = "\n\n"
PARAGRAPH_SEPARATOR = "\n\n"


class PDFExtractor:
    """Extract text from PDF documents page by page."""

    def extract(self, data: bytes) -> str:
        pages = self.extract_pages(data)
        return PAGE_SEPARATOR.join(pages)

    def extract_pages(self, data: bytes) -> List[str]:
        """Return one string per page, fragments joined by single spaces."""

        pages: List[str] = []
        try:
            for page_layout in extract_pages(io.BytesIO(data)):
                fragments = []
                for element in page_layout:
                    if not isinstance(element, LTTextContainer):
                        continue
                    fragment = _WHITESPACE_RE.sub(" ", element.get_text()).strip()
                    if fragment:
                        fragments.append(fragment)
                pages.append(" ".join(fragments))
        except Exception as error:
            LOGGER.warning("pdfminer failed to parse PDF content: %s", error)
            raise ExtractionFailure("Failed to extract text from PDF document", cause=error) from error

        LOGGER.debug("Extracted %s PDF pages", len(pages))
        return pages


class DocxExtractor:
    """Extract raw paragraph text from Microsoft Word documents."""

    def extract(self, data: bytes) -> str:
        try:
            document = load_docx(io.BytesIO(data))
        except Exception as error:
            LOGGER.warning("python-docx failed to parse Word content: %s", error)
            raise ExtractionFailure("Failed to extract text from Word document", cause=error) from error

        paragraphs = [paragraph.text for paragraph in document.paragraphs if paragraph.text]
        LOGGER.debug("Extracted %s Word paragraphs", len(paragraphs))
        return PARAGRAPH_SEPARATOR.join(paragraphs)


_PDF_EXTRACTOR = PDFExtractor()
_DOCX_EXTRACTOR = DocxExtractor()


def extract_text(
    data: bytes,
    media_type: Optional[str | DocumentFormat],
    file_name: Optional[str] = None,
) -> str:
    """Extract plain text from ``data`` according to its declared media type.

    An empty or whitespace-only result is returned unchanged; deciding that a
    document holds no usable text is left to the caller.
    """

    if isinstance(media_type, DocumentFormat):
        document_format = media_type
    else:
        document_format = DocumentFormatDetector.detect(media_type, file_name)

    if document_format is DocumentFormat.PDF:
        return _PDF_EXTRACTOR.extract(data)
    return _DOCX_EXTRACTOR.extract(data)


__all__ = ["DocxExtractor", "PDFExtractor", "extract_text"]
