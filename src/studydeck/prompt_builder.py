"""Utilities for constructing the instructions sent to the language model."""
from __future__ import annotations

from pathlib import Path

from studydeck.models import GenerationOptions

_PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"
_FLASHCARD_PROMPT_PATH = _PROMPTS_DIR / "flashcards_system.txt"
_SUMMARY_PROMPT_PATH = _PROMPTS_DIR / "summary_system.txt"

FINAL_SUMMARY_WORD_LIMIT = 500
PARTIAL_SUMMARY_WORD_LIMIT = 250

DEFINITIONS_CLAUSE = "Include questions about important definitions and key terms that appear in the text."
CONCEPTS_CLAUSE = "Include questions about fundamental concepts explained in the text."
DIRECT_ANSWER_CLAUSE = (
    "Although I need to generate multiple options to maintain the format, "
    "these flashcards will be used for direct answer questions."
)


def _load_template(path: Path) -> str:
    """Read and trim the contents of a template file."""
    return path.read_text(encoding="utf-8").strip()


_FLASHCARD_TEMPLATE = _load_template(_FLASHCARD_PROMPT_PATH)
_SUMMARY_TEMPLATE = _load_template(_SUMMARY_PROMPT_PATH)


def _source_label(is_partial: bool) -> str:
    return "document section" if is_partial else "document"


def build_flashcard_prompt(options: GenerationOptions | None = None) -> str:
    """Compose the system prompt for flashcard generation."""

    options = options or GenerationOptions()
    sections = [_FLASHCARD_TEMPLATE]
    if options.generate_definitions:
        sections.append(DEFINITIONS_CLAUSE)
    if options.generate_concepts:
        sections.append(CONCEPTS_CLAUSE)
    # The four-option wire format is required either way.
    if not options.include_multiple_choice:
        sections.append(DIRECT_ANSWER_CLAUSE)
    return "\n\n".join(sections)


def build_summary_prompt(word_limit: int, is_partial: bool) -> str:
    """Compose the system prompt for a final or partial summary."""

    if word_limit <= 0:
        raise ValueError("word_limit must be a positive integer")
    return _SUMMARY_TEMPLATE.format(word_limit=word_limit, source_label=_source_label(is_partial))


def build_flashcard_user_message(chunk: str) -> str:
    return f"Here is the document text to generate flashcards from:\n\n{chunk}"


def build_summary_user_message(text: str, is_partial: bool) -> str:
    return f"Here is the {_source_label(is_partial)} to summarize:\n\n{text}"


__all__ = [
    "CONCEPTS_CLAUSE",
    "DEFINITIONS_CLAUSE",
    "DIRECT_ANSWER_CLAUSE",
    "FINAL_SUMMARY_WORD_LIMIT",
    "PARTIAL_SUMMARY_WORD_LIMIT",
    "build_flashcard_prompt",
    "build_flashcard_user_message",
    "build_summary_prompt",
    "build_summary_user_message",
]
