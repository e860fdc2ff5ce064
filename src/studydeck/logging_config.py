"""JSON logging for the service and the generation audit trail."""

from __future__ import annotations

import json
import logging
import logging.config
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

AUDIT_LOGGER_NAME = "studydeck.generation.audit"
AUDIT_LOG_FILE = "generation_audit.log"

# HTTP client loggers that report every upstream request at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "openai")

_STANDARD_RECORD_KEYS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}
_API_KEY_RE = re.compile(r"sk-[A-Za-z0-9_\-]{8,}")
REDACTED_KEY = "sk-***"


def redact(value: Any) -> Any:
    """Mask anything shaped like an OpenAI key inside strings, lists and dicts."""

    if isinstance(value, str):
        return _API_KEY_RE.sub(REDACTED_KEY, value)
    if isinstance(value, dict):
        return {key: redact(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


class MinimalJSONFormatter(logging.Formatter):
    """One JSON object per record; dict messages from telemetry are merged in."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.name,
        }

        if isinstance(record.msg, dict):
            payload.update(record.msg)
        elif record.getMessage():
            payload["message"] = record.getMessage()

        if record.exc_info and "exc" not in payload:
            payload["exc_info"] = self.formatException(record.exc_info)

        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_KEYS and not key.startswith("_")
        )
        return json.dumps(redact(payload), ensure_ascii=False, default=str)


def configure_logging(log_dir: str | Path = "logs", level: str = "INFO") -> Path:
    """Install JSON logging on stderr and the audit file; return the audit log path."""

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    audit_file = log_path / AUDIT_LOG_FILE

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": MinimalJSONFormatter}},
            "handlers": {
                "stderr": {"class": "logging.StreamHandler", "formatter": "json"},
                "audit": {
                    "class": "logging.FileHandler",
                    "filename": str(audit_file),
                    "encoding": "utf-8",
                    "formatter": "json",
                },
            },
            "root": {"level": level.upper(), "handlers": ["stderr"]},
            "loggers": {
                AUDIT_LOGGER_NAME: {"level": "INFO", "handlers": ["audit"], "propagate": False},
                **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
            },
        }
    )
    return audit_file


__all__ = ["AUDIT_LOGGER_NAME", "MinimalJSONFormatter", "configure_logging", "redact"]
