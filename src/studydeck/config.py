"""Environment-driven configuration for the flashcard service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_FLASHCARD_CHUNK_CHARS = 4000
DEFAULT_SUMMARY_CHUNK_CHARS = 6000
DEFAULT_MAX_TEXT_WORDS = 5000
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings resolved from the process environment."""

    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_MODEL
    openai_base_url: Optional[str] = None
    openai_timeout_seconds: float = 60.0
    flashcard_chunk_chars: int = DEFAULT_FLASHCARD_CHUNK_CHARS
    summary_chunk_chars: int = DEFAULT_SUMMARY_CHUNK_CHARS
    max_concurrency: int = 4
    generation_timeout_seconds: Optional[float] = None
    max_text_words: int = DEFAULT_MAX_TEXT_WORDS
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_dir: str = "logs"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=_env_str("OPENAI_API_KEY"),
            openai_model=_env_str("OPENAI_MODEL") or DEFAULT_MODEL,
            openai_base_url=_env_str("OPENAI_BASE_URL"),
            openai_timeout_seconds=_env_float("OPENAI_TIMEOUT_SECONDS", 60.0) or 60.0,
            flashcard_chunk_chars=max(_env_int("FLASHCARD_CHUNK_CHARS", DEFAULT_FLASHCARD_CHUNK_CHARS), 1),
            summary_chunk_chars=max(_env_int("SUMMARY_CHUNK_CHARS", DEFAULT_SUMMARY_CHUNK_CHARS), 1),
            max_concurrency=max(_env_int("GENERATION_MAX_CONCURRENCY", 4), 1),
            generation_timeout_seconds=_env_float("GENERATION_TIMEOUT_SECONDS", None),
            max_text_words=_env_int("MAX_TEXT_WORDS", DEFAULT_MAX_TEXT_WORDS),
            max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            log_dir=_env_str("LOG_DIR") or "logs",
            log_level=(_env_str("LOG_LEVEL") or "INFO").upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings instance."""

    return Settings.from_env()


def reset_settings_cache() -> None:
    """Clear the cached settings (primarily for testing)."""

    get_settings.cache_clear()  # type: ignore[attr-defined]


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
