"""API router exposing collection, flashcard, quiz and activity endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from studydeck.api.schemas import (
    ActivityOut,
    CollectionCreate,
    CollectionOut,
    CollectionUpdate,
    FlashcardCreate,
    FlashcardOut,
    QuizSessionCreate,
    QuizSessionOut,
)
from studydeck.services.documents import DocumentService, NotFoundError, get_document_service
from studydeck.storage import Collection, InMemoryStorage, get_storage

router = APIRouter(prefix="/api", tags=["collections"])


def _require_collection(storage: InMemoryStorage, collection_id: int) -> Collection:
    collection = storage.get_collection(collection_id)
    if collection is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    return collection


@router.get("/collections", response_model=list[CollectionOut])
def list_collections(storage: InMemoryStorage = Depends(get_storage)) -> list[CollectionOut]:
    return [CollectionOut.model_validate(item) for item in storage.get_collections()]


@router.get("/collections/{collection_id}", response_model=CollectionOut)
def get_collection(collection_id: int, storage: InMemoryStorage = Depends(get_storage)) -> CollectionOut:
    return CollectionOut.model_validate(_require_collection(storage, collection_id))


@router.post("/collections", response_model=CollectionOut, status_code=201)
def create_collection(
    payload: CollectionCreate, storage: InMemoryStorage = Depends(get_storage)
) -> CollectionOut:
    collection = storage.create_collection(
        payload.title, payload.description, favorite=payload.favorite
    )
    storage.create_activity(
        "create",
        f'Created a new collection: "{collection.title}"',
        entity_id=collection.id,
        entity_type="collection",
    )
    return CollectionOut.model_validate(collection)


@router.patch("/collections/{collection_id}", response_model=CollectionOut)
def update_collection(
    collection_id: int,
    payload: CollectionUpdate,
    storage: InMemoryStorage = Depends(get_storage),
) -> CollectionOut:
    _require_collection(storage, collection_id)
    updated = storage.update_collection(collection_id, **payload.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    return CollectionOut.model_validate(updated)


@router.delete("/collections/{collection_id}", status_code=204)
def delete_collection(collection_id: int, storage: InMemoryStorage = Depends(get_storage)) -> Response:
    if not storage.delete_collection(collection_id):
        raise HTTPException(status_code=404, detail="Collection not found")
    return Response(status_code=204)


@router.get("/collections/{collection_id}/flashcards", response_model=list[FlashcardOut])
def list_flashcards(
    collection_id: int, storage: InMemoryStorage = Depends(get_storage)
) -> list[FlashcardOut]:
    _require_collection(storage, collection_id)
    return [FlashcardOut.model_validate(card) for card in storage.get_flashcards(collection_id)]


@router.post("/flashcards", response_model=FlashcardOut, status_code=201)
def create_flashcard(
    payload: FlashcardCreate, storage: InMemoryStorage = Depends(get_storage)
) -> FlashcardOut:
    """Store a hand-written flashcard in an existing collection."""

    _require_collection(storage, payload.collection_id)
    flashcard = storage.create_flashcard(
        payload.question, payload.correct_answer, payload.options, payload.collection_id
    )
    return FlashcardOut.model_validate(flashcard)


@router.post("/quiz-sessions", response_model=QuizSessionOut, status_code=201)
def create_quiz_session(
    payload: QuizSessionCreate,
    service: DocumentService = Depends(get_document_service),
) -> QuizSessionOut:
    if payload.score > payload.total_questions:
        raise HTTPException(status_code=400, detail="Score cannot exceed the number of questions")
    try:
        session = service.record_quiz(payload.collection_id, payload.score, payload.total_questions)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return QuizSessionOut.model_validate(session)


@router.get("/activities/recent", response_model=list[ActivityOut])
def recent_activities(
    limit: int = Query(10, ge=1, le=100),
    storage: InMemoryStorage = Depends(get_storage),
) -> list[ActivityOut]:
    return [ActivityOut.model_validate(item) for item in storage.get_recent_activities(limit)]
