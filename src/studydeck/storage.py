"""In-memory storage collaborator for collections, flashcards and documents."""
from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from itertools import count
from typing import Any, Dict, Iterable, List, Optional, Sequence

from studydeck.models import FlashcardCandidate

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Collection:
    id: int
    title: str
    description: Optional[str] = None
    favorite: bool = False
    user_id: Optional[int] = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class Flashcard:
    id: int
    question: str
    correct_answer: str
    options: List[str]
    collection_id: int
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class Document:
    """Metadata about an uploaded document; the extracted text is not kept."""

    id: int
    file_name: str
    file_size: int
    file_type: str
    collection_id: int
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class QuizSession:
    id: int
    collection_id: int
    score: int
    total_questions: int
    user_id: Optional[int] = None
    completed_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class Activity:
    id: int
    type: str
    description: str
    user_id: Optional[int] = None
    entity_id: Optional[int] = None
    entity_type: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)


def to_payload(record: Any) -> Dict[str, Any]:
    """Serialise a storage record into a JSON-friendly dictionary."""

    payload = asdict(record)
    for key, value in payload.items():
        if isinstance(value, datetime):
            payload[key] = value.isoformat()
    return payload


_UPDATABLE_COLLECTION_FIELDS = frozenset({"title", "description", "favorite"})


class InMemoryStorage:
    """Thread-safe repository mirroring a relational schema in process memory."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._ids = {name: count(1) for name in ("collection", "flashcard", "document", "quiz", "activity")}
        self._collections: Dict[int, Collection] = {}
        self._flashcards: Dict[int, Flashcard] = {}
        self._documents: Dict[int, Document] = {}
        self._quiz_sessions: Dict[int, QuizSession] = {}
        self._activities: Dict[int, Activity] = {}

    def _next_id(self, name: str) -> int:
        return next(self._ids[name])

    # Collections --------------------------------------------------------------
    def get_collections(self) -> List[Collection]:
        with self._lock:
            return sorted(self._collections.values(), key=lambda item: (item.created_at, item.id), reverse=True)

    def get_collection(self, collection_id: int) -> Optional[Collection]:
        with self._lock:
            return self._collections.get(collection_id)

    def create_collection(
        self,
        title: str,
        description: Optional[str] = None,
        *,
        favorite: bool = False,
        user_id: Optional[int] = None,
    ) -> Collection:
        with self._lock:
            collection = Collection(
                id=self._next_id("collection"),
                title=title,
                description=description,
                favorite=favorite,
                user_id=user_id,
            )
            self._collections[collection.id] = collection
        LOGGER.debug("Created collection %s (%s)", collection.id, title)
        return collection

    def update_collection(self, collection_id: int, **updates: Any) -> Optional[Collection]:
        unknown = set(updates) - _UPDATABLE_COLLECTION_FIELDS
        if unknown:
            raise ValueError(f"Unsupported collection fields: {', '.join(sorted(unknown))}")
        with self._lock:
            current = self._collections.get(collection_id)
            if current is None:
                return None
            updated = replace(current, **updates)
            self._collections[collection_id] = updated
            return updated

    def delete_collection(self, collection_id: int) -> bool:
        """Delete a collection together with its flashcards, documents and quizzes."""

        with self._lock:
            if self._collections.pop(collection_id, None) is None:
                return False
            for store in (self._flashcards, self._documents, self._quiz_sessions):
                doomed = [key for key, record in store.items() if record.collection_id == collection_id]
                for key in doomed:
                    del store[key]
        LOGGER.debug("Deleted collection %s", collection_id)
        return True

    # Flashcards ---------------------------------------------------------------
    def get_flashcards(self, collection_id: int) -> List[Flashcard]:
        with self._lock:
            return [card for card in self._flashcards.values() if card.collection_id == collection_id]

    def get_flashcard(self, flashcard_id: int) -> Optional[Flashcard]:
        with self._lock:
            return self._flashcards.get(flashcard_id)

    def create_flashcard(
        self, question: str, correct_answer: str, options: Sequence[str], collection_id: int
    ) -> Flashcard:
        with self._lock:
            flashcard = Flashcard(
                id=self._next_id("flashcard"),
                question=question,
                correct_answer=correct_answer,
                options=list(options),
                collection_id=collection_id,
            )
            self._flashcards[flashcard.id] = flashcard
            return flashcard

    def create_flashcards(
        self, candidates: Iterable[FlashcardCandidate], collection_id: int
    ) -> List[Flashcard]:
        """Persist generated candidates under ``collection_id`` in order."""

        with self._lock:
            return [
                self.create_flashcard(
                    candidate.question, candidate.correct_answer, candidate.options, collection_id
                )
                for candidate in candidates
            ]

    def delete_flashcard(self, flashcard_id: int) -> bool:
        with self._lock:
            return self._flashcards.pop(flashcard_id, None) is not None

    # Documents ----------------------------------------------------------------
    def get_documents(self, collection_id: int) -> List[Document]:
        with self._lock:
            return [doc for doc in self._documents.values() if doc.collection_id == collection_id]

    def get_document(self, document_id: int) -> Optional[Document]:
        with self._lock:
            return self._documents.get(document_id)

    def create_document(
        self, file_name: str, file_size: int, file_type: str, collection_id: int
    ) -> Document:
        with self._lock:
            document = Document(
                id=self._next_id("document"),
                file_name=file_name,
                file_size=file_size,
                file_type=file_type,
                collection_id=collection_id,
            )
            self._documents[document.id] = document
            return document

    def delete_document(self, document_id: int) -> bool:
        with self._lock:
            return self._documents.pop(document_id, None) is not None

    # Quiz sessions ------------------------------------------------------------
    def create_quiz_session(
        self, collection_id: int, score: int, total_questions: int, user_id: Optional[int] = None
    ) -> QuizSession:
        with self._lock:
            session = QuizSession(
                id=self._next_id("quiz"),
                collection_id=collection_id,
                score=score,
                total_questions=total_questions,
                user_id=user_id,
            )
            self._quiz_sessions[session.id] = session
            return session

    def get_quiz_sessions_by_collection(self, collection_id: int) -> List[QuizSession]:
        with self._lock:
            return [item for item in self._quiz_sessions.values() if item.collection_id == collection_id]

    # Activities ---------------------------------------------------------------
    def create_activity(
        self,
        type: str,
        description: str,
        *,
        entity_id: Optional[int] = None,
        entity_type: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Activity:
        with self._lock:
            activity = Activity(
                id=self._next_id("activity"),
                type=type,
                description=description,
                entity_id=entity_id,
                entity_type=entity_type,
                user_id=user_id,
            )
            self._activities[activity.id] = activity
            return activity

    def get_recent_activities(self, limit: int = 10) -> List[Activity]:
        with self._lock:
            ordered = sorted(self._activities.values(), key=lambda item: (item.created_at, item.id), reverse=True)
            return ordered[: max(limit, 0)]


_storage = InMemoryStorage()


def get_storage() -> InMemoryStorage:
    """FastAPI dependency returning the shared :class:`InMemoryStorage` instance."""

    return _storage


__all__ = [
    "Activity",
    "Collection",
    "Document",
    "Flashcard",
    "InMemoryStorage",
    "QuizSession",
    "get_storage",
    "to_payload",
]
