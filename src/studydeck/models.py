"""Value objects passed through the generation pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    """Flags steering the flashcard prompt."""

    generate_definitions: bool = True
    generate_concepts: bool = True
    include_multiple_choice: bool = True


@dataclass(frozen=True, slots=True)
class FlashcardCandidate:
    """A model-proposed flashcard that is not yet attached to a collection."""

    question: str
    correct_answer: str
    options: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "correctAnswer": self.correct_answer,
            "options": list(self.options),
        }
