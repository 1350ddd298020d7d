"""
StudySpark Backend — Abstract Storage Repository
==================================================

What:  Abstract base class defining the persistence contract used by every route.
Why:   The app runs either against a relational database or, with no
       DATABASE_URL, against process memory. Routes must not care which.
How:   Concrete implementations inherit from StorageRepository:
         - MemoryStorage:   dicts keyed by id (dev / single instance only)
         - DatabaseStorage: async SQLAlchemy (PostgreSQL in production, SQLite in tests)
Who:   Selected once at startup by studyspark.storage.build_storage().

Contract (shared by both implementations):
    - Identifiers are random UUID4 strings.
    - Lookups of a missing id return None; deletes of a missing id return False.
      Routes translate both into NotFoundError (404).
    - Creating a note/flashcard/question increments the owning subject's
      counter; deleting decrements it, never below zero. A child whose subject
      does not exist is still stored and no counter changes.
    - Deleting a subject also deletes its notes, summaries, flashcards and questions.
    - subject_id="all" on flashcard/question listings means no filter.
    - Summaries and study plans list newest first; other lists keep insertion order.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from studyspark.schemas.dashboard import DashboardStats
from studyspark.schemas.flashcard import FlashcardCreate, FlashcardResponse, FlashcardUpdate
from studyspark.schemas.note import NoteCreate, NoteResponse
from studyspark.schemas.question import QuestionCreate, QuestionResponse
from studyspark.schemas.study_plan import (
    StudyPlanCreate,
    StudyPlanResponse,
    StudyTask,
    StudyTaskUpdate,
)
from studyspark.schemas.subject import SubjectCreate, SubjectResponse, SubjectUpdate
from studyspark.schemas.summary import SummaryCreate, SummaryResponse

# Sentinel accepted by the flashcard/question listings
ALL_SUBJECTS = "all"

UPCOMING_TASKS_LIMIT = 5
RECENT_SUMMARIES_LIMIT = 5


class StorageRepository(ABC):
    """Persistence interface for subjects, notes and all generated study material."""

    backend_name: str = "unknown"

    # ── Subjects ──────────────────────────────────────────────────────────

    @abstractmethod
    async def get_subjects(self) -> List[SubjectResponse]:
        ...

    @abstractmethod
    async def get_subject(self, subject_id: str) -> Optional[SubjectResponse]:
        ...

    @abstractmethod
    async def create_subject(self, data: SubjectCreate) -> SubjectResponse:
        ...

    @abstractmethod
    async def update_subject(
        self, subject_id: str, data: SubjectUpdate
    ) -> Optional[SubjectResponse]:
        """Apply only the fields explicitly set on `data`."""
        ...

    @abstractmethod
    async def delete_subject(self, subject_id: str) -> bool:
        """Delete the subject and every note, summary, flashcard and question it owns."""
        ...

    # ── Notes ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_notes(self, subject_id: Optional[str] = None) -> List[NoteResponse]:
        ...

    @abstractmethod
    async def get_note(self, note_id: str) -> Optional[NoteResponse]:
        ...

    @abstractmethod
    async def create_note(self, data: NoteCreate) -> NoteResponse:
        """Insert the note, then bump notes_count and last_accessed on its subject."""
        ...

    @abstractmethod
    async def delete_note(self, note_id: str) -> bool:
        ...

    # ── Summaries ─────────────────────────────────────────────────────────

    @abstractmethod
    async def get_summaries(self, subject_id: Optional[str] = None) -> List[SummaryResponse]:
        ...

    @abstractmethod
    async def get_summary(self, summary_id: str) -> Optional[SummaryResponse]:
        ...

    @abstractmethod
    async def create_summary(self, data: SummaryCreate) -> SummaryResponse:
        ...

    @abstractmethod
    async def delete_summary(self, summary_id: str) -> bool:
        ...

    # ── Flashcards ────────────────────────────────────────────────────────

    @abstractmethod
    async def get_flashcards(self, subject_id: Optional[str] = None) -> List[FlashcardResponse]:
        ...

    @abstractmethod
    async def get_flashcard(self, flashcard_id: str) -> Optional[FlashcardResponse]:
        ...

    @abstractmethod
    async def create_flashcard(self, data: FlashcardCreate) -> FlashcardResponse:
        ...

    @abstractmethod
    async def create_flashcards(self, items: List[FlashcardCreate]) -> List[FlashcardResponse]:
        """Insert every card, then raise each distinct subject's counter by its batch size."""
        ...

    @abstractmethod
    async def update_flashcard(
        self, flashcard_id: str, data: FlashcardUpdate
    ) -> Optional[FlashcardResponse]:
        """Merge supplied fields, stamp last_reviewed and count one more review."""
        ...

    @abstractmethod
    async def delete_flashcard(self, flashcard_id: str) -> bool:
        ...

    # ── Questions ─────────────────────────────────────────────────────────

    @abstractmethod
    async def get_questions(self, subject_id: Optional[str] = None) -> List[QuestionResponse]:
        ...

    @abstractmethod
    async def get_question(self, question_id: str) -> Optional[QuestionResponse]:
        ...

    @abstractmethod
    async def create_question(self, data: QuestionCreate) -> QuestionResponse:
        ...

    @abstractmethod
    async def create_questions(self, items: List[QuestionCreate]) -> List[QuestionResponse]:
        ...

    @abstractmethod
    async def delete_question(self, question_id: str) -> bool:
        ...

    # ── Study plans ───────────────────────────────────────────────────────

    @abstractmethod
    async def get_study_plans(self) -> List[StudyPlanResponse]:
        ...

    @abstractmethod
    async def get_study_plan(self, plan_id: str) -> Optional[StudyPlanResponse]:
        ...

    @abstractmethod
    async def create_study_plan(self, data: StudyPlanCreate) -> StudyPlanResponse:
        """Store the plan, assigning a fresh id to every task."""
        ...

    @abstractmethod
    async def update_study_plan_task(
        self, plan_id: str, task_id: str, data: StudyTaskUpdate
    ) -> Optional[StudyPlanResponse]:
        """
        Merge `data` into one embedded task and write the whole list back.

        Returns the updated plan, or None when either the plan or the task is missing.
        """
        ...

    @abstractmethod
    async def delete_study_plan(self, plan_id: str) -> bool:
        ...

    # ── Dashboard ─────────────────────────────────────────────────────────

    @abstractmethod
    async def get_dashboard_stats(self) -> DashboardStats:
        ...

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def health_check(self) -> bool:
        """True when the backend can serve queries."""
        return True

    async def close(self) -> None:
        """Release connections; called from the app lifespan on shutdown."""
        return None


# ── Shared dashboard helpers ──────────────────────────────────────────────


def today_iso() -> str:
    """Today's UTC date as YYYY-MM-DD, the format every task date uses."""
    return datetime.now(timezone.utc).date().isoformat()


def select_upcoming_tasks(
    plans: Iterable[StudyPlanResponse], today: Optional[str] = None
) -> List[StudyTask]:
    """
    Incomplete tasks dated today or later, earliest first, capped at five.

    Dates compare as strings; ISO dates order the same way as the calendar.
    """
    today = today or today_iso()
    pending = [
        task
        for plan in plans
        for task in plan.tasks
        if not task.completed and task.date >= today
    ]
    pending.sort(key=lambda task: task.date)
    return pending[:UPCOMING_TASKS_LIMIT]
