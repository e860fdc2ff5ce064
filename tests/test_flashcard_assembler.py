import asyncio

import pytest

from conftest import FakeCompletions, flashcards_json, user_content
from studydeck.config import Settings
from studydeck.errors import ConfigurationFailure, GenerationCancelled, MalformedResponseFailure, UpstreamFailure
from studydeck.llm.client import GenerationClient
from studydeck.models import GenerationOptions
from studydeck.services.flashcards import AssemblyStatus, FlashcardAssembler

THREE_CHUNK_TEXT = "a" * 4000 + "b" * 4000 + "c" * 1000


def _chunk_marker(call: dict) -> str:
    return user_content(call)[-1]


def _respond_per_chunk(call: dict) -> str:
    marker = _chunk_marker(call)
    return flashcards_json(f"Q-{marker}")


def test_generate_returns_one_candidate_per_chunk_in_order(make_client) -> None:
    completions = FakeCompletions(responder=_respond_per_chunk)
    assembler = FlashcardAssembler(make_client(completions))

    candidates = asyncio.run(assembler.generate(THREE_CHUNK_TEXT, GenerationOptions()))

    assert [candidate.question for candidate in candidates] == ["Q-a", "Q-b", "Q-c"]
    assert len(completions.calls) == 3
    assert all(candidate.correct_answer in candidate.options for candidate in candidates)


def test_order_follows_chunks_not_completion_time(make_client) -> None:
    delays = {"a": 0.05, "b": 0.02, "c": 0.0}
    completions = FakeCompletions(
        responder=_respond_per_chunk,
        delay=lambda call: delays[_chunk_marker(call)],
    )
    assembler = FlashcardAssembler(make_client(completions), max_concurrency=3)

    candidates = asyncio.run(assembler.generate(THREE_CHUNK_TEXT))

    assert [candidate.question for candidate in candidates] == ["Q-a", "Q-b", "Q-c"]


def test_any_chunk_failure_fails_the_whole_document(make_client) -> None:
    def responder(call: dict):
        if _chunk_marker(call) == "b":
            return "{not json"
        return _respond_per_chunk(call)

    assembler = FlashcardAssembler(make_client(FakeCompletions(responder=responder)))

    with pytest.raises(MalformedResponseFailure):
        asyncio.run(assembler.generate(THREE_CHUNK_TEXT))


def test_configuration_failure_precedes_chunking() -> None:
    client = GenerationClient(Settings(openai_api_key=None), client=object())
    assembler = FlashcardAssembler(client)

    with pytest.raises(ConfigurationFailure):
        asyncio.run(assembler.generate(THREE_CHUNK_TEXT))


def test_timeout_cancels_the_document(make_client) -> None:
    completions = FakeCompletions(responder=_respond_per_chunk, delay=lambda call: 1.0)
    assembler = FlashcardAssembler(make_client(completions), timeout=0.05)

    with pytest.raises(GenerationCancelled):
        asyncio.run(assembler.generate(THREE_CHUNK_TEXT))


def test_short_text_makes_a_single_call(make_client) -> None:
    completions = FakeCompletions([flashcards_json("Only")])
    assembler = FlashcardAssembler(make_client(completions))

    candidates = asyncio.run(assembler.generate("A short document."))

    assert [candidate.question for candidate in candidates] == ["Only"]
    assert len(completions.calls) == 1


def test_generate_report_keeps_successful_chunks(make_client) -> None:
    def responder(call: dict):
        if _chunk_marker(call) == "b":
            return ConnectionError("reset")
        return _respond_per_chunk(call)

    assembler = FlashcardAssembler(make_client(FakeCompletions(responder=responder)))

    report = asyncio.run(assembler.generate_report(THREE_CHUNK_TEXT))

    assert report.status is AssemblyStatus.PARTIAL
    assert report.chunk_count == 3
    assert [candidate.question for candidate in report.candidates] == ["Q-a", "Q-c"]
    assert [failure.index for failure in report.failures] == [1]
    assert isinstance(report.failures[0].failure, UpstreamFailure)


def test_generate_report_all_failed(make_client) -> None:
    assembler = FlashcardAssembler(make_client(FakeCompletions(responder=lambda call: None)))

    report = asyncio.run(assembler.generate_report(THREE_CHUNK_TEXT))

    assert report.status is AssemblyStatus.FAILED
    assert report.candidates == []
    assert len(report.failures) == 3
