"""Request and response bodies exchanged with the web client."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model serialised with camelCase keys, accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CollectionOut(ApiModel):
    id: int
    title: str
    description: Optional[str] = None
    favorite: bool = False
    user_id: Optional[int] = None
    created_at: datetime


class CollectionCreate(ApiModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    favorite: bool = False


class CollectionUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    favorite: Optional[bool] = None


class FlashcardOut(ApiModel):
    id: int
    question: str
    correct_answer: str
    options: List[str]
    collection_id: int
    created_at: datetime


class FlashcardCreate(ApiModel):
    question: str = Field(..., min_length=1)
    correct_answer: str = Field(..., min_length=1)
    options: List[str] = Field(default_factory=list)
    collection_id: int


class DocumentOut(ApiModel):
    id: int
    file_name: str
    file_size: int
    file_type: str
    collection_id: int
    created_at: datetime


class GenerationResponse(ApiModel):
    """Response returned after a collection was generated from a source."""

    collection: CollectionOut
    document: DocumentOut
    flashcards_count: int


class TextGenerationRequest(ApiModel):
    text: str = ""
    title: str = ""
    description: Optional[str] = None


class SummaryResponse(ApiModel):
    summary: str


class UploadSummaryResponse(ApiModel):
    summary: str
    file_name: str
    file_size: int
    word_count: int
    summary_word_count: int


class QuizSessionCreate(ApiModel):
    collection_id: int
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=1)


class QuizSessionOut(ApiModel):
    id: int
    collection_id: int
    score: int
    total_questions: int
    user_id: Optional[int] = None
    completed_at: datetime


class ActivityOut(ApiModel):
    id: int
    type: str
    description: str
    user_id: Optional[int] = None
    entity_id: Optional[int] = None
    entity_type: Optional[str] = None
    created_at: datetime


class StatusResponse(BaseModel):
    status: str
    message: str
