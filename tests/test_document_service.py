import asyncio
from dataclasses import replace

import pytest

from conftest import FakeCompletions, flashcards_json, summary_json
from studydeck.config import Settings
from studydeck.errors import ConfigurationFailure, ExtractionFailure, MalformedResponseFailure
from studydeck.ingest.format_detection import DOCX_MEDIA_TYPE
from studydeck.llm.client import GenerationClient
from studydeck.services.documents import DocumentService, InvalidRequestError, NotFoundError, TextTooLongError
from studydeck.services.flashcards import FlashcardAssembler
from studydeck.services.summary import SummaryReducer


@pytest.fixture
def build_service(settings: Settings, storage, make_client):
    def _build(completions: FakeCompletions, **overrides) -> DocumentService:
        effective = replace(settings, **overrides)
        client = make_client(completions)
        return DocumentService(
            storage=storage,
            assembler=FlashcardAssembler(client),
            reducer=SummaryReducer(client),
            settings=effective,
        )

    return _build


def test_create_from_upload_persists_collection_and_cards(build_service, storage, docx_bytes) -> None:
    service = build_service(FakeCompletions([flashcards_json("Q1", "Q2")]))
    data = docx_bytes("Photosynthesis converts light into chemical energy.")

    outcome = asyncio.run(
        service.create_from_upload(data, "bio.docx", DOCX_MEDIA_TYPE, "Biology", "Plants")
    )

    assert outcome.flashcards_count == 2
    assert outcome.document.file_name == "bio.docx"
    assert outcome.document.file_size == len(data)
    assert [card.question for card in storage.get_flashcards(outcome.collection.id)] == ["Q1", "Q2"]
    kinds = [activity.type for activity in storage.get_recent_activities()]
    assert kinds == ["generation", "upload"]


def test_generation_failure_leaves_no_collection(build_service, storage, docx_bytes) -> None:
    service = build_service(FakeCompletions(["not json"]))

    with pytest.raises(MalformedResponseFailure):
        asyncio.run(
            service.create_from_upload(docx_bytes("Some text."), "a.docx", DOCX_MEDIA_TYPE, "Broken")
        )
    assert storage.get_collections() == []
    assert storage.get_recent_activities() == []


def test_document_without_text_is_an_extraction_failure(build_service, storage, docx_bytes) -> None:
    completions = FakeCompletions([])
    service = build_service(completions)

    with pytest.raises(ExtractionFailure):
        asyncio.run(service.create_from_upload(docx_bytes(), "empty.docx", DOCX_MEDIA_TYPE, "Empty"))
    assert completions.calls == []
    assert storage.get_collections() == []
    assert storage.get_recent_activities() == []


def test_upload_requires_title(build_service, docx_bytes) -> None:
    service = build_service(FakeCompletions([]))

    with pytest.raises(InvalidRequestError):
        asyncio.run(service.create_from_upload(docx_bytes("x"), "a.docx", DOCX_MEDIA_TYPE, "  "))


def test_create_from_text_enforces_word_limit(build_service, storage) -> None:
    completions = FakeCompletions([])
    service = build_service(completions, max_text_words=5)

    with pytest.raises(TextTooLongError) as excinfo:
        asyncio.run(service.create_from_text("one two three four five six", "Too long"))
    assert excinfo.value.word_count == 6
    assert completions.calls == []
    assert storage.get_collections() == []


def test_create_from_text_records_plain_text_document(build_service, storage) -> None:
    service = build_service(FakeCompletions([flashcards_json("Q")]))

    outcome = asyncio.run(service.create_from_text("Mitochondria make ATP.", "Cells"))

    assert outcome.flashcards_count == 1
    assert outcome.document.file_type == "text/plain"
    assert outcome.document.file_name.startswith("text_input_")
    assert "manual text input" in storage.get_recent_activities(1)[0].description


def test_missing_key_surfaces_configuration_failure(storage) -> None:
    client = GenerationClient(Settings(openai_api_key=None), client=object())
    service = DocumentService(
        storage=storage,
        assembler=FlashcardAssembler(client),
        reducer=SummaryReducer(client),
        settings=Settings(openai_api_key=None),
    )

    with pytest.raises(ConfigurationFailure):
        asyncio.run(service.create_from_text("Some text to study.", "Notes"))


def test_summarize_upload_reports_word_counts(build_service, docx_bytes) -> None:
    service = build_service(FakeCompletions([summary_json("Plants make food.")]))
    data = docx_bytes("Plants use sunlight to make food from water and air.")

    outcome = asyncio.run(service.summarize_upload(data, "plants.docx", DOCX_MEDIA_TYPE))

    assert outcome.summary == "Plants make food."
    assert outcome.word_count == 10
    assert outcome.summary_word_count == 3
    assert outcome.file_name == "plants.docx"


def test_summarize_document_records_activity(build_service, storage, docx_bytes) -> None:
    collection = storage.create_collection("Notes")
    document = storage.create_document("notes.docx", 10, DOCX_MEDIA_TYPE, collection.id)
    service = build_service(FakeCompletions([summary_json("Short.")]))

    summary = asyncio.run(service.summarize_document(document.id, docx_bytes("Body text."), DOCX_MEDIA_TYPE))

    assert summary == "Short."
    assert storage.get_recent_activities(1)[0].type == "summarize"
    with pytest.raises(NotFoundError):
        asyncio.run(service.summarize_document(999, b"", DOCX_MEDIA_TYPE))


def test_record_quiz(build_service, storage) -> None:
    collection = storage.create_collection("Quiz me")
    service = build_service(FakeCompletions([]))

    session = service.record_quiz(collection.id, 4, 5)

    assert session.score == 4
    assert storage.get_recent_activities(1)[0].description == 'Scored 4/5 in "Quiz me" quiz'
    with pytest.raises(NotFoundError):
        service.record_quiz(999, 1, 1)
