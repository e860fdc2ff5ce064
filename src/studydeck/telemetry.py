"""Centralised observability helpers for structured pipeline logging."""

from __future__ import annotations

import logging
import os
import platform
import socket
import sys
import time
import traceback
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

LOGGER = logging.getLogger("studydeck.telemetry")

_ENV_KEYS_TO_LOG: tuple[str, ...] = (
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OPENAI_TIMEOUT_SECONDS",
    "FLASHCARD_CHUNK_CHARS",
    "SUMMARY_CHUNK_CHARS",
    "GENERATION_MAX_CONCURRENCY",
    "GENERATION_TIMEOUT_SECONDS",
    "MAX_TEXT_WORDS",
    "MAX_UPLOAD_BYTES",
    "LOG_DIR",
)


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    req_id: str | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    extra: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Emit a structured log event with the agreed-upon schema."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if req_id:
        event["req_id"] = req_id
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    if extra:
        event.update(extra)
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_app_startup_event() -> None:
    # The API key itself is never logged, only whether it is present.
    env_values = {key: os.getenv(key) for key in _ENV_KEYS_TO_LOG if os.getenv(key) is not None}
    env_values["OPENAI_API_KEY_SET"] = bool(os.getenv("OPENAI_API_KEY"))
    details = {
        "env": env_values,
        "python": sys.version.split()[0],
        "platform": platform.platform(),
    }
    payload = {
        "pid": os.getpid(),
        "hostname": socket.gethostname(),
        "cwd": str(Path.cwd()),
    }
    log_event(LOGGER, "app.startup", details=details, extra=payload)


def emit_generation_request(
    *,
    req_id: str,
    task: str,
    model: str,
    prompt_preview: str,
    prompt_len: int,
    content_len: int,
) -> None:
    details = {
        "task": task,
        "model": model,
        "prompt_preview": prompt_preview[:120],
        "prompt_len": prompt_len,
        "content_len": content_len,
    }
    log_event(LOGGER, "generation.request", req_id=req_id, details=details)


def emit_generation_result(
    *,
    req_id: str,
    task: str,
    duration_ms: float,
    items: int | None = None,
    response_len: int | None = None,
    failure_kind: str | None = None,
) -> None:
    details = {
        "task": task,
        "items": items,
        "response_len": response_len,
        "failure_kind": failure_kind,
    }
    level = "warning" if failure_kind else "info"
    log_event(
        LOGGER,
        "generation.result",
        level=level,
        req_id=req_id,
        duration_ms=duration_ms,
        details=details,
    )


def emit_pipeline_event(
    step: str,
    *,
    task: str,
    chunks: int | None = None,
    text_len: int | None = None,
    items: int | None = None,
    duration_ms: float | None = None,
    failure_kind: str | None = None,
) -> None:
    details = {
        "task": task,
        "chunks": chunks,
        "text_len": text_len,
        "items": items,
        "failure_kind": failure_kind,
    }
    level = "warning" if failure_kind else "info"
    log_event(LOGGER, step, level=level, duration_ms=duration_ms, details=details)


def emit_exception(
    *,
    module: str,
    error: BaseException,
    req_id: str | None = None,
    suggestion: str | None = None,
) -> None:
    details = {"module": module}
    if suggestion:
        details["suggestion"] = suggestion
    log_event(
        LOGGER,
        "exception",
        level="error",
        req_id=req_id,
        details=details,
        exc=error,
    )


@contextmanager
def traced_duration(step: str, *, logger: Optional[logging.Logger] = None, **fields: Any) -> Iterator[None]:
    start = time.perf_counter()
    log_event(logger or LOGGER, f"{step}.start", details=fields)
    try:
        yield
    except Exception as error:
        log_event(logger or LOGGER, f"{step}.error", level="error", details=fields, exc=error)
        raise
    finally:
        end = time.perf_counter()
        log_event(
            logger or LOGGER,
            f"{step}.complete",
            duration_ms=(end - start) * 1000.0,
            details=fields,
        )


__all__ = [
    "emit_app_startup_event",
    "emit_exception",
    "emit_generation_request",
    "emit_generation_result",
    "emit_pipeline_event",
    "log_event",
    "traced_duration",
]
