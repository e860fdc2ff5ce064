"""API router serving collection exports as file downloads."""
from __future__ import annotations

from typing import List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Response

from studydeck.exporters import (
    export_anki_csv,
    export_csv,
    export_json,
    sanitize_filename,
    should_include_multiple_choice,
)
from studydeck.storage import Collection, Flashcard, InMemoryStorage, get_storage

router = APIRouter(prefix="/api", tags=["exports"])


def _load(storage: InMemoryStorage, collection_id: int) -> Tuple[Collection, List[Flashcard]]:
    collection = storage.get_collection(collection_id)
    if collection is None:
        raise HTTPException(status_code=404, detail="Collection not found")
    flashcards = storage.get_flashcards(collection_id)
    if not flashcards:
        raise HTTPException(status_code=404, detail="No flashcards found in this collection")
    return collection, flashcards


def _attachment(
    storage: InMemoryStorage,
    collection: Collection,
    body: str,
    *,
    media_type: str,
    file_name: str,
    format_label: str,
) -> Response:
    storage.create_activity(
        "export",
        f'Exported "{collection.title}" collection to {format_label}',
        entity_id=collection.id,
        entity_type="collection",
    )
    return Response(
        content=body.encode("utf-8"),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/export-csv/{collection_id}")
def export_collection_csv(collection_id: int, storage: InMemoryStorage = Depends(get_storage)) -> Response:
    collection, flashcards = _load(storage, collection_id)
    body = export_csv(flashcards, should_include_multiple_choice(flashcards))
    return _attachment(
        storage,
        collection,
        body,
        media_type="text/csv",
        file_name=f"{sanitize_filename(collection.title)}.csv",
        format_label="CSV format",
    )


@router.get("/export-json/{collection_id}")
def export_collection_json(collection_id: int, storage: InMemoryStorage = Depends(get_storage)) -> Response:
    collection, flashcards = _load(storage, collection_id)
    return _attachment(
        storage,
        collection,
        export_json(collection, flashcards),
        media_type="application/json",
        file_name=f"{sanitize_filename(collection.title)}.json",
        format_label="JSON format",
    )


@router.get("/export-anki/{collection_id}")
def export_collection_anki(collection_id: int, storage: InMemoryStorage = Depends(get_storage)) -> Response:
    """Anki text-import CSV; binary ``.apkg`` packages are not produced."""

    collection, flashcards = _load(storage, collection_id)
    return _attachment(
        storage,
        collection,
        export_anki_csv(flashcards),
        media_type="text/csv",
        file_name=f"{sanitize_filename(collection.title)}_anki.csv",
        format_label="Anki import format",
    )
