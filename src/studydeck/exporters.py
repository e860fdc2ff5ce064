"""Serialise flashcard collections into downloadable CSV and JSON files."""
from __future__ import annotations

import csv
import io
import json
import re
from typing import Sequence

from studydeck.storage import Collection, Flashcard, to_payload

MAX_EXPORTED_OPTIONS = 4
ANKI_TAG = "flashcards"
ANKI_CORRECT_OPTION = '<li><strong style="color: #2e7d32;">{option}</strong></li>'
ANKI_OPTIONS_HEADER = '<br><br><div style="font-size: 0.9em; color: #555;">Options:</div><ul>'

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_UNDERSCORE_RUN = re.compile(r"_+")


def sanitize_filename(title: str) -> str:
    """Lower-case ``title`` and replace anything outside ``[a-z0-9]`` with ``_``."""

    return _UNDERSCORE_RUN.sub("_", _NON_ALNUM.sub("_", title.lower()))


def should_include_multiple_choice(flashcards: Sequence[Flashcard]) -> bool:
    with_options = sum(1 for card in flashcards if card.options)
    return with_options > len(flashcards) / 2


def export_csv(flashcards: Sequence[Flashcard], include_multiple_choice: bool = True) -> str:
    """Render ``flashcards`` as CSV with an optional column per answer option."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    header = ["Question", "Correct Answer"]
    if include_multiple_choice:
        header.extend(f"Option {position}" for position in range(1, MAX_EXPORTED_OPTIONS + 1))
    writer.writerow(header)

    for card in flashcards:
        row = [card.question, card.correct_answer]
        if include_multiple_choice:
            options = list(card.options[:MAX_EXPORTED_OPTIONS])
            options.extend([""] * (MAX_EXPORTED_OPTIONS - len(options)))
            row.extend(options)
        writer.writerow(row)
    return buffer.getvalue()


def export_json(collection: Collection, flashcards: Sequence[Flashcard]) -> str:
    payload = {
        "collection": {
            "id": collection.id,
            "title": collection.title,
            "description": collection.description,
            "createdAt": to_payload(collection)["created_at"],
        },
        "flashcards": [
            {
                "question": card.question,
                "correctAnswer": card.correct_answer,
                "options": list(card.options),
            }
            for card in flashcards
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def export_anki_csv(flashcards: Sequence[Flashcard]) -> str:
    """Render ``front,back,tag`` rows importable by Anki's text importer.

    The back of each card shows the correct answer followed by the option list
    as HTML, with the correct option highlighted.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for card in flashcards:
        back = card.correct_answer
        if card.options:
            items = "".join(
                ANKI_CORRECT_OPTION.format(option=option)
                if option == card.correct_answer
                else f"<li>{option}</li>"
                for option in card.options
            )
            back = f"{back}{ANKI_OPTIONS_HEADER}{items}</ul>"
        writer.writerow([card.question, back, ANKI_TAG])
    return buffer.getvalue()


__all__ = [
    "export_anki_csv",
    "export_csv",
    "export_json",
    "sanitize_filename",
    "should_include_multiple_choice",
]
