"""Practice question request/response schemas."""

from typing import List, Literal, Optional

from studyspark.schemas.base import CamelModel
from studyspark.schemas.flashcard import Difficulty

QuestionType = Literal["mcq", "short", "long", "numerical"]


class QuestionCreate(CamelModel):
    subject_id: str
    summary_id: Optional[str] = None
    type: QuestionType
    question: str
    options: Optional[List[str]] = None
    answer: str
    explanation: Optional[str] = None
    difficulty: Difficulty = "medium"


class QuestionResponse(QuestionCreate):
    id: str
