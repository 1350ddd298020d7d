"""Note request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from studyspark.schemas.base import CamelModel


class NoteCreate(CamelModel):
    """Body of POST /api/notes (typed text)."""
    subject_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    file_type: str = Field(default="text", description="text, pdf or image")
    file_name: Optional[str] = None


class NoteResponse(CamelModel):
    id: str
    subject_id: str
    title: str
    content: str
    file_type: str = "text"
    file_name: Optional[str] = None
    created_at: datetime
