"""Translation of pipeline failures into HTTP errors."""
from __future__ import annotations

from fastapi import HTTPException

from studydeck.errors import FailureKind, GenerationFailure, describe_failure

FAILURE_STATUS_CODES = {
    FailureKind.CONFIGURATION: 503,
    FailureKind.QUOTA_EXCEEDED: 429,
    FailureKind.EXTRACTION: 422,
    FailureKind.CANCELLED: 504,
}
DEFAULT_FAILURE_STATUS = 502


def failure_to_http(failure: GenerationFailure) -> HTTPException:
    """Build the :class:`HTTPException` reported for ``failure``."""

    status_code = FAILURE_STATUS_CODES.get(failure.kind, DEFAULT_FAILURE_STATUS)
    return HTTPException(
        status_code=status_code,
        detail={
            "message": describe_failure(failure),
            "kind": failure.kind.value,
            "error": failure.message,
        },
    )


__all__ = ["DEFAULT_FAILURE_STATUS", "FAILURE_STATUS_CODES", "failure_to_http"]
