import pytest

from studydeck.models import GenerationOptions
from studydeck.prompt_builder import (
    CONCEPTS_CLAUSE,
    DEFINITIONS_CLAUSE,
    DIRECT_ANSWER_CLAUSE,
    build_flashcard_prompt,
    build_flashcard_user_message,
    build_summary_prompt,
    build_summary_user_message,
)


def test_flashcard_prompt_includes_enabled_clauses() -> None:
    prompt = build_flashcard_prompt(GenerationOptions())

    assert "exactly 4 answer options" in prompt
    assert '"correctAnswer"' in prompt
    assert DEFINITIONS_CLAUSE in prompt
    assert CONCEPTS_CLAUSE in prompt
    assert DIRECT_ANSWER_CLAUSE not in prompt


def test_flashcard_prompt_without_multiple_choice_keeps_four_options() -> None:
    options = GenerationOptions(
        generate_definitions=False, generate_concepts=False, include_multiple_choice=False
    )
    prompt = build_flashcard_prompt(options)

    assert DEFINITIONS_CLAUSE not in prompt
    assert CONCEPTS_CLAUSE not in prompt
    assert DIRECT_ANSWER_CLAUSE in prompt
    assert "exactly 4 answer options" in prompt


def test_summary_prompt_varies_with_partial_flag() -> None:
    final = build_summary_prompt(500, is_partial=False)
    partial = build_summary_prompt(250, is_partial=True)

    assert "approximately 500 words" in final
    assert "following document and" in final
    assert "approximately 250 words" in partial
    assert "following document section" in partial
    assert '"summary"' in final


def test_summary_prompt_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        build_summary_prompt(0, is_partial=False)


def test_user_messages_carry_the_text() -> None:
    assert build_flashcard_user_message("chunk body").endswith("\n\nchunk body")
    assert build_summary_user_message("body", True).startswith("Here is the document section to summarize")
    assert build_summary_user_message("body", False).startswith("Here is the document to summarize")
