"""Summary request/response schemas."""

from datetime import datetime
from typing import List

from pydantic import Field

from studyspark.schemas.base import CamelModel


class Definition(CamelModel):
    term: str
    definition: str


class SummaryCreate(CamelModel):
    """Built by the summarize endpoint from the AI Gateway result."""
    note_id: str
    subject_id: str
    title: str
    key_points: List[str] = Field(default_factory=list)
    definitions: List[Definition] = Field(default_factory=list)
    formulas: List[str] = Field(default_factory=list)
    main_concepts: List[str] = Field(default_factory=list)
    full_summary: str


class SummaryResponse(SummaryCreate):
    id: str
    created_at: datetime
