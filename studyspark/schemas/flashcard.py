"""Flashcard request/response schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from studyspark.schemas.base import CamelModel

Difficulty = Literal["easy", "medium", "hard"]


class FlashcardCreate(CamelModel):
    subject_id: str
    summary_id: Optional[str] = None
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    difficulty: Difficulty = "medium"


class FlashcardUpdate(CamelModel):
    """
    Body of PATCH /api/flashcards/{id}.

    The frontend sends {"difficulty": "easy"|"hard"} after each review; every
    update counts as one review (times_reviewed += 1).
    """
    difficulty: Optional[Difficulty] = None
    front: Optional[str] = Field(default=None, min_length=1)
    back: Optional[str] = Field(default=None, min_length=1)


class FlashcardResponse(CamelModel):
    id: str
    subject_id: str
    summary_id: Optional[str] = None
    front: str
    back: str
    difficulty: Difficulty = "medium"
    last_reviewed: Optional[datetime] = None
    times_reviewed: int = 0
