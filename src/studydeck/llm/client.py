"""Client wrapping the OpenAI chat completions API for flashcards and summaries."""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, List, Optional, Type, TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from studydeck.config import Settings, get_settings
from studydeck.errors import (
    ConfigurationFailure,
    EmptyResponseFailure,
    GenerationFailure,
    MalformedResponseFailure,
    classify_upstream_error,
)
from studydeck.llm.schemas import FlashcardEnvelope, SummaryEnvelope
from studydeck.models import FlashcardCandidate
from studydeck.prompt_builder import build_flashcard_user_message, build_summary_user_message
from studydeck.telemetry import emit_generation_request, emit_generation_result

LOGGER = logging.getLogger(__name__)

RESPONSE_FORMAT = {"type": "json_object"}

_EnvelopeT = TypeVar("_EnvelopeT", bound=BaseModel)


def _parse_envelope(content: str, schema: Type[_EnvelopeT]) -> _EnvelopeT:
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as error:
        raise MalformedResponseFailure(
            f"Invalid JSON in OpenAI API response: {error.msg}", cause=error
        ) from error

    try:
        return schema.model_validate(payload)
    except ValidationError as error:
        first = error.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        raise MalformedResponseFailure(
            f"Invalid response format from OpenAI API: {location}: {first.get('msg')}",
            cause=error,
        ) from error


def parse_flashcard_response(content: str) -> List[FlashcardCandidate]:
    """Validate a ``{"flashcards": [...]}`` payload and convert it to candidates.

    Every card must carry exactly four options one of which equals its
    ``correctAnswer``; a single violating card rejects the whole payload.
    """

    envelope = _parse_envelope(content, FlashcardEnvelope)
    return [
        FlashcardCandidate(
            question=item.question,
            correct_answer=item.correct_answer,
            options=tuple(item.options),
        )
        for item in envelope.flashcards
    ]


def parse_summary_response(content: str) -> str:
    """Validate a ``{"summary": "..."}`` payload and return the summary text."""

    return _parse_envelope(content, SummaryEnvelope).summary


class GenerationClient:
    """Single-attempt wrapper around the upstream chat model.

    The OpenAI client is created lazily from :class:`Settings` unless one is
    injected; anything exposing ``chat.completions.create`` works.
    """

    def __init__(self, settings: Optional[Settings] = None, *, client: Any | None = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    @property
    def model(self) -> str:
        return self._settings.openai_model

    def _ensure_client(self) -> Any:
        if not self._settings.openai_api_key:
            raise ConfigurationFailure("OpenAI API key is not configured")
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
                timeout=self._settings.openai_timeout_seconds,
            )
        return self._client

    def ensure_configured(self) -> None:
        """Raise :class:`ConfigurationFailure` unless a credential is configured."""

        self._ensure_client()

    async def _complete(self, *, req_id: str, task: str, prompt: str, user_content: str) -> str:
        client = self._ensure_client()
        emit_generation_request(
            req_id=req_id,
            task=task,
            model=self.model,
            prompt_preview=prompt,
            prompt_len=len(prompt),
            content_len=len(user_content),
        )

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": user_content},
                ],
                response_format=RESPONSE_FORMAT,
            )
        except GenerationFailure:
            raise
        except Exception as error:
            raise classify_upstream_error(error) from error

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise EmptyResponseFailure("No response from OpenAI API")
        return content

    async def generate_flashcards(self, chunk_text: str, prompt: str) -> List[FlashcardCandidate]:
        """Ask the model for flashcards covering ``chunk_text``."""

        req_id = uuid.uuid4().hex
        started = time.perf_counter()
        try:
            content = await self._complete(
                req_id=req_id,
                task="flashcards",
                prompt=prompt,
                user_content=build_flashcard_user_message(chunk_text),
            )
            candidates = parse_flashcard_response(content)
        except GenerationFailure as failure:
            emit_generation_result(
                req_id=req_id,
                task="flashcards",
                duration_ms=(time.perf_counter() - started) * 1000.0,
                failure_kind=failure.kind.value,
            )
            raise

        emit_generation_result(
            req_id=req_id,
            task="flashcards",
            duration_ms=(time.perf_counter() - started) * 1000.0,
            items=len(candidates),
            response_len=len(content),
        )
        return candidates

    async def generate_summary(self, chunk_text: str, prompt: str, *, is_partial: bool = False) -> str:
        """Ask the model for a summary of ``chunk_text``."""

        task = "summary.partial" if is_partial else "summary"
        req_id = uuid.uuid4().hex
        started = time.perf_counter()
        try:
            content = await self._complete(
                req_id=req_id,
                task=task,
                prompt=prompt,
                user_content=build_summary_user_message(chunk_text, is_partial),
            )
            summary = parse_summary_response(content)
        except GenerationFailure as failure:
            emit_generation_result(
                req_id=req_id,
                task=task,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                failure_kind=failure.kind.value,
            )
            raise

        emit_generation_result(
            req_id=req_id,
            task=task,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            items=1,
            response_len=len(content),
        )
        return summary

    async def check_credentials(self) -> None:
        """Perform a lightweight authenticated call (``models.list``)."""

        client = self._ensure_client()
        try:
            await client.models.list()
        except Exception as error:
            raise classify_upstream_error(error) from error


__all__ = [
    "GenerationClient",
    "RESPONSE_FORMAT",
    "parse_flashcard_response",
    "parse_summary_response",
]
