"""Subject request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from studyspark.schemas.base import CamelModel


class SubjectCreate(CamelModel):
    """Body of POST /api/subjects. Counters and timestamps are server-owned."""
    name: str = Field(min_length=1, description="Subject name, e.g. 'Biology'")
    icon: str = Field(default="book", description="Frontend icon key")
    color: str = Field(default="blue", description="Frontend palette colour")


class SubjectUpdate(CamelModel):
    """Body of PATCH /api/subjects/{id}; only supplied fields change."""
    name: Optional[str] = Field(default=None, min_length=1)
    icon: Optional[str] = None
    color: Optional[str] = None


class SubjectResponse(CamelModel):
    id: str
    name: str
    icon: str = "book"
    color: str = "blue"
    notes_count: int = 0
    flashcards_count: int = 0
    questions_count: int = 0
    last_accessed: Optional[datetime] = None
