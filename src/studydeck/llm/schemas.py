"""Wire schemas for the structured JSON returned by the language model."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

OPTIONS_PER_CARD = 4


class FlashcardItem(BaseModel):
    """One flashcard as emitted by the model."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    question: str = Field(..., min_length=1)
    correct_answer: str = Field(..., alias="correctAnswer", min_length=1)
    options: List[str]

    @model_validator(mode="after")
    def _correct_answer_is_an_option(self) -> "FlashcardItem":
        if len(self.options) != OPTIONS_PER_CARD:
            raise ValueError(f"expected exactly {OPTIONS_PER_CARD} options, got {len(self.options)}")
        if self.correct_answer not in self.options:
            raise ValueError("correctAnswer must appear in options")
        return self


class FlashcardEnvelope(BaseModel):
    """Top-level ``{"flashcards": [...]}`` object."""

    flashcards: List[FlashcardItem]


class SummaryEnvelope(BaseModel):
    """Top-level ``{"summary": "..."}`` object."""

    model_config = ConfigDict(str_strip_whitespace=True)

    summary: str = Field(..., min_length=1)


__all__ = ["FlashcardEnvelope", "FlashcardItem", "OPTIONS_PER_CARD", "SummaryEnvelope"]
