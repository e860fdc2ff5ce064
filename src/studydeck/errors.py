"""Failure taxonomy shared by the extraction and generation pipeline."""
from __future__ import annotations

from enum import Enum
from typing import Tuple


class FailureKind(str, Enum):
    """Classified failure kinds reported to callers of the pipeline."""

    CONFIGURATION = "configuration"
    EXTRACTION = "extraction"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_RESPONSE = "malformed_response"
    QUOTA_EXCEEDED = "quota_exceeded"
    UPSTREAM = "upstream"
    CANCELLED = "cancelled"


class GenerationFailure(RuntimeError):
    """Base exception carrying a :class:`FailureKind` and a readable message."""

    kind: FailureKind = FailureKind.UPSTREAM

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class ConfigurationFailure(GenerationFailure):
    """Raised when the upstream credential is not configured."""

    kind = FailureKind.CONFIGURATION


class ExtractionFailure(GenerationFailure):
    """Raised when a document cannot be parsed or yields no usable text."""

    kind = FailureKind.EXTRACTION


class EmptyResponseFailure(GenerationFailure):
    """Raised when the upstream model returns no content."""

    kind = FailureKind.EMPTY_RESPONSE


class MalformedResponseFailure(GenerationFailure):
    """Raised when the upstream content does not match the required shape."""

    kind = FailureKind.MALFORMED_RESPONSE


class QuotaExceededFailure(GenerationFailure):
    """Raised when the upstream signals quota or rate exhaustion."""

    kind = FailureKind.QUOTA_EXCEEDED


class UpstreamFailure(GenerationFailure):
    """Raised for any other upstream error (network, auth, server side)."""

    kind = FailureKind.UPSTREAM


class GenerationCancelled(GenerationFailure):
    """Raised when a document run is abandoned because of a timeout."""

    kind = FailureKind.CANCELLED


# Ordered (substring, kind) pairs checked against upstream error messages.
UPSTREAM_SIGNATURES: Tuple[Tuple[str, FailureKind], ...] = (
    ("exceeded your current quota", FailureKind.QUOTA_EXCEEDED),
    ("insufficient_quota", FailureKind.QUOTA_EXCEEDED),
)

QUOTA_EXCEEDED_MESSAGE = "OpenAI API quota exceeded. Please update your API key."

_FAILURE_TYPES = {
    FailureKind.QUOTA_EXCEEDED: QuotaExceededFailure,
    FailureKind.UPSTREAM: UpstreamFailure,
}


def classify_upstream_message(message: str) -> FailureKind:
    """Return the failure kind matching ``message``; unknown text is ``UPSTREAM``."""

    for signature, kind in UPSTREAM_SIGNATURES:
        if signature in message:
            return kind
    return FailureKind.UPSTREAM


def classify_upstream_error(error: Exception) -> GenerationFailure:
    """Wrap an arbitrary upstream exception into a classified failure."""

    if isinstance(error, GenerationFailure):
        return error

    message = str(error) or type(error).__name__
    kind = classify_upstream_message(message)
    failure_type = _FAILURE_TYPES[kind]
    if kind is FailureKind.QUOTA_EXCEEDED:
        return failure_type(f"{QUOTA_EXCEEDED_MESSAGE} ({message})", cause=error)
    return failure_type(message, cause=error)


def describe_failure(failure: GenerationFailure) -> str:
    """Return the user-facing message for a classified failure."""

    if failure.kind is FailureKind.CONFIGURATION:
        return "The OpenAI API key is not configured. Set OPENAI_API_KEY and try again."
    if failure.kind is FailureKind.QUOTA_EXCEEDED:
        return QUOTA_EXCEEDED_MESSAGE
    if failure.kind is FailureKind.CANCELLED:
        return "Processing was cancelled before it completed."
    return "Processing failed."


__all__ = [
    "ConfigurationFailure",
    "EmptyResponseFailure",
    "ExtractionFailure",
    "FailureKind",
    "GenerationCancelled",
    "GenerationFailure",
    "MalformedResponseFailure",
    "QUOTA_EXCEEDED_MESSAGE",
    "QuotaExceededFailure",
    "UPSTREAM_SIGNATURES",
    "UpstreamFailure",
    "classify_upstream_error",
    "classify_upstream_message",
    "describe_failure",
]
