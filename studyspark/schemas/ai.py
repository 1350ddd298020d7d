"""
StudySpark Backend — AI Request/Result Schemas
================================================

What:  Request bodies of the five /api/ai/* endpoints, plus the typed
       results the AI Gateway returns after its parse-with-defaults step.
"""

from typing import List, Literal, Optional

from pydantic import Field

from studyspark.schemas.base import CamelModel
from studyspark.schemas.flashcard import Difficulty
from studyspark.schemas.question import QuestionType
from studyspark.schemas.study_plan import Priority
from studyspark.schemas.summary import Definition


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SummarizeRequest(CamelModel):
    content: str = Field(min_length=1)
    note_id: str
    subject_id: str
    title: str


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
    history: Optional[List[ChatMessage]] = None


class ChatResponse(CamelModel):
    response: str


class GenerateFlashcardsRequest(CamelModel):
    content: str = Field(min_length=1)
    subject_id: str
    summary_id: Optional[str] = None
    # Accepted up to 20; the gateway still caps generation at 10
    count: int = Field(default=10, ge=1, le=20)


class GenerateQuestionsRequest(CamelModel):
    content: str = Field(min_length=1)
    subject_id: str
    summary_id: Optional[str] = None
    types: List[QuestionType] = Field(default_factory=lambda: ["mcq", "short"])
    # Accepted up to 20; the gateway still caps generation at 8
    count: int = Field(default=10, ge=1, le=20)


class GenerateStudyPlanRequest(CamelModel):
    prompt: str = Field(min_length=1)
    subjects: Optional[List[str]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Gateway Results: every field is always populated
# ══════════════════════════════════════════════════════════════════════════


class SummaryResult(CamelModel):
    key_points: List[str] = Field(default_factory=list)
    definitions: List[Definition] = Field(default_factory=list)
    formulas: List[str] = Field(default_factory=list)
    main_concepts: List[str] = Field(default_factory=list)
    full_summary: str = "Summary not available."


class FlashcardResult(CamelModel):
    front: str
    back: str


class QuestionResult(CamelModel):
    type: QuestionType
    question: str
    options: Optional[List[str]] = None
    answer: str
    explanation: Optional[str] = None
    difficulty: Difficulty = "medium"


class StudyTaskResult(CamelModel):
    topic: str
    subject: str
    duration: str
    priority: Priority
    date: str
    time_slot: Optional[str] = None


class StudyPlanResult(CamelModel):
    title: str
    description: str
    start_date: str
    end_date: str
    tasks: List[StudyTaskResult] = Field(default_factory=list)
