"""Utilities for detecting the format of uploaded documents."""
from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import Path
from typing import Optional

from studydeck.errors import ExtractionFailure

PDF_MEDIA_TYPE = "application/pdf"
MSWORD_MEDIA_TYPE = "application/msword"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_MEDIA_TYPES = frozenset({PDF_MEDIA_TYPE, MSWORD_MEDIA_TYPE, DOCX_MEDIA_TYPE})


class DocumentFormat(str, Enum):
    """Supported document formats."""

    PDF = "pdf"
    WORD = "word"


class DocumentFormatDetector:
    """Detects the document format from a media type tag or a file name."""

    _TAG_MAP = {
        PDF_MEDIA_TYPE: DocumentFormat.PDF,
        MSWORD_MEDIA_TYPE: DocumentFormat.WORD,
        DOCX_MEDIA_TYPE: DocumentFormat.WORD,
        "pdf": DocumentFormat.PDF,
        "doc": DocumentFormat.WORD,
        "docx": DocumentFormat.WORD,
    }

    @classmethod
    def detect(cls, media_type: Optional[str], file_name: Optional[str] = None) -> DocumentFormat:
        """Return the detected document format.

        The explicit media type wins; the file name is consulted through
        ``mimetypes`` and then its suffix when the media type is missing or
        unknown.
        """

        if media_type:
            tag = media_type.split(";", 1)[0].strip().lower()
            if tag in cls._TAG_MAP:
                return cls._TAG_MAP[tag]

        if file_name:
            guessed_type, _ = mimetypes.guess_type(file_name)
            if guessed_type and guessed_type in cls._TAG_MAP:
                return cls._TAG_MAP[guessed_type]

            suffix = Path(file_name).suffix.lower().lstrip(".")
            if suffix in cls._TAG_MAP:
                return cls._TAG_MAP[suffix]

        raise ExtractionFailure(f"Unsupported file type: {media_type or file_name}")


def is_supported_media_type(media_type: Optional[str]) -> bool:
    if not media_type:
        return False
    return media_type.split(";", 1)[0].strip().lower() in SUPPORTED_MEDIA_TYPES
