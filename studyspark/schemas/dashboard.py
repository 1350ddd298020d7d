"""Dashboard projection schema (computed, never stored)."""

from typing import List

from pydantic import Field

from studyspark.schemas.base import CamelModel
from studyspark.schemas.study_plan import StudyTask
from studyspark.schemas.summary import SummaryResponse


class DashboardStats(CamelModel):
    total_subjects: int = 0
    total_notes: int = 0
    total_flashcards: int = 0
    total_questions: int = 0
    # Streak tracking is not implemented; always 0
    study_streak: int = 0
    recent_summaries: List[SummaryResponse] = Field(default_factory=list)
    upcoming_tasks: List[StudyTask] = Field(default_factory=list)
