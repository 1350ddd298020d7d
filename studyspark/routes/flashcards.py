"""
StudySpark Backend — Flashcard Route Handlers
===============================================

The review screen PATCHes {"difficulty": "easy" | "hard"} after each card;
every PATCH stamps lastReviewed and increments timesReviewed.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from studyspark.dependencies import get_storage
from studyspark.exceptions import NotFoundError
from studyspark.schemas.base import ErrorResponse
from studyspark.schemas.flashcard import FlashcardResponse, FlashcardUpdate
from studyspark.storage.base import StorageRepository

router = APIRouter(prefix="/api/flashcards", tags=["Flashcards"])

NOT_FOUND = {404: {"description": "Flashcard not found", "model": ErrorResponse}}


@router.get("", response_model=List[FlashcardResponse], summary="List flashcards")
async def list_flashcards(
    subject_id: Optional[str] = Query(
        default=None, alias="subjectId", description="Subject filter; 'all' disables it"
    ),
    storage: StorageRepository = Depends(get_storage),
):
    return await storage.get_flashcards(subject_id)


@router.get("/{flashcard_id}", response_model=FlashcardResponse, responses=NOT_FOUND)
async def get_flashcard(flashcard_id: str, storage: StorageRepository = Depends(get_storage)):
    card = await storage.get_flashcard(flashcard_id)
    if card is None:
        raise NotFoundError(resource="Flashcard", resource_id=flashcard_id)
    return card


@router.patch(
    "/{flashcard_id}",
    response_model=FlashcardResponse,
    responses=NOT_FOUND,
    summary="Record a review (and optionally edit the card)",
)
async def update_flashcard(
    flashcard_id: str,
    data: FlashcardUpdate,
    storage: StorageRepository = Depends(get_storage),
):
    card = await storage.update_flashcard(flashcard_id, data)
    if card is None:
        raise NotFoundError(resource="Flashcard", resource_id=flashcard_id)
    return card


@router.delete("/{flashcard_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_flashcard(flashcard_id: str, storage: StorageRepository = Depends(get_storage)):
    if not await storage.delete_flashcard(flashcard_id):
        raise NotFoundError(resource="Flashcard", resource_id=flashcard_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
