"""Shared fixtures: a scripted chat-completions client and test settings."""
from __future__ import annotations

import asyncio
import io
import json
from types import SimpleNamespace
from typing import Any, Callable, Iterable, List, Optional, Sequence

import pytest

from studydeck.config import Settings, reset_settings_cache
from studydeck.llm.client import GenerationClient
from studydeck.storage import InMemoryStorage

TEST_API_KEY = "sk-test-" + "x" * 40


def card(question: str, answer: Optional[str] = None, options: Optional[Sequence[str]] = None) -> dict:
    answer = answer or f"{question} answer"
    if options is None:
        options = [answer, f"{question} wrong 1", f"{question} wrong 2", f"{question} wrong 3"]
    return {"question": question, "correctAnswer": answer, "options": list(options)}


def flashcards_json(*questions: str) -> str:
    return json.dumps({"flashcards": [card(question) for question in questions]})


def summary_json(text: str) -> str:
    return json.dumps({"summary": text})


def _completion(content: Optional[str]) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeCompletions:
    """Async stand-in for ``AsyncOpenAI().chat.completions``.

    Responses are either popped from ``responses`` in call order or produced
    by ``responder(call_kwargs)``. Exceptions are raised instead of returned.
    ``delay(call_kwargs)`` may return a number of seconds to sleep first.
    """

    def __init__(
        self,
        responses: Optional[Iterable[Any]] = None,
        *,
        responder: Optional[Callable[[dict], Any]] = None,
        delay: Optional[Callable[[dict], float]] = None,
    ) -> None:
        self.responses: List[Any] = list(responses or [])
        self.responder = responder
        self.delay = delay
        self.calls: List[dict] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.delay is not None:
            await asyncio.sleep(self.delay(kwargs))
        if self.responder is not None:
            result = self.responder(kwargs)
        else:
            result = self.responses.pop(0)
        if isinstance(result, BaseException):
            raise result
        return _completion(result)


class FakeModels:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls = 0

    async def list(self) -> List[Any]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return []


class FakeOpenAI:
    def __init__(self, completions: FakeCompletions, models: Optional[FakeModels] = None) -> None:
        self.completions = completions
        self.chat = SimpleNamespace(completions=completions)
        self.models = models or FakeModels()


def user_content(call: dict) -> str:
    return call["messages"][1]["content"]


def system_content(call: dict) -> str:
    return call["messages"][0]["content"]


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterable[None]:
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key=TEST_API_KEY, openai_model="gpt-test")


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., GenerationClient]:
    """Build a :class:`GenerationClient` backed by a :class:`FakeOpenAI`."""

    def _make(completions: FakeCompletions, models: Optional[FakeModels] = None) -> GenerationClient:
        return GenerationClient(settings, client=FakeOpenAI(completions, models))

    return _make


@pytest.fixture
def docx_bytes() -> Callable[..., bytes]:
    from docx import Document

    def _build(*paragraphs: str) -> bytes:
        document = Document()
        for paragraph in paragraphs:
            document.add_paragraph(paragraph)
        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture
def pdf_bytes() -> bytes:
    # Minimal PDF document with extractable text "Hello PDF"
    return (
        b"%PDF-1.4\n"
        b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
        b"2 0 obj\n<< /Type /Pages /Kids [3 0 R] /Count 1 >>\nendobj\n"
        b"3 0 obj\n<< /Type /Page /Parent 2 0 R /MediaBox [0 0 200 200] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>\nendobj\n"
        b"4 0 obj\n<< /Length 53 >>\nstream\nBT /F1 12 Tf 72 120 Td (Hello PDF) Tj ET\nendstream\nendobj\n"
        b"5 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>\nendobj\n"
        b"xref\n0 6\n0000000000 65535 f \n0000000010 00000 n \n0000000059 00000 n \n0000000110 00000 n \n"
        b"0000000276 00000 n \n0000000393 00000 n \ntrailer\n<< /Size 6 /Root 1 0 R >>\nstartxref\n452\n%%EOF\n"
    )


@pytest.fixture
def build_pdf() -> Callable[[Sequence[Sequence[str]]], bytes]:
    """Build a PDF with one page per entry and one text object per string.

    Text objects on a page sit 100pt apart so pdfminer keeps them in separate
    layout boxes.
    """

    def _build(pages: Sequence[Sequence[str]]) -> bytes:
        kids = b" ".join(b"%d 0 R" % (4 + 2 * index) for index in range(len(pages)))
        objects = [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [%s] /Count %d >>" % (kids, len(pages)),
            b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        ]
        for index, texts in enumerate(pages):
            stream = b"\n".join(
                b"BT /F1 12 Tf 72 %d Td (%s) Tj ET" % (700 - 100 * line, text.encode("latin-1"))
                for line, text in enumerate(texts)
            )
            objects.append(
                b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                b"/Contents %d 0 R /Resources << /Font << /F1 3 0 R >> >> >>" % (5 + 2 * index)
            )
            objects.append(b"<< /Length %d >>\nstream\n%s\nendstream" % (len(stream), stream))

        out = bytearray(b"%PDF-1.4\n")
        offsets = []
        for number, body in enumerate(objects, start=1):
            offsets.append(len(out))
            out += b"%d 0 obj\n%s\nendobj\n" % (number, body)
        xref_offset = len(out)
        out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
        for offset in offsets:
            out += b"%010d 00000 n \n" % offset
        out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
        return bytes(out)

    return _build
