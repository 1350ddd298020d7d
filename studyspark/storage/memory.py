"""
StudySpark Backend — In-Memory Storage
========================================

What:  StorageRepository backed by plain dicts of response models.
When:  Selected when DATABASE_URL is not configured (local development, demos).
Why:   Lets the frontend run end to end without provisioning PostgreSQL.

Limitations:
    - Process-local: each uvicorn worker has its own copy.
    - Everything is lost on restart (build_storage logs a warning).
    - No locking; the asyncio event loop never interleaves inside these
      methods because none of them await.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional

from studyspark.database import new_id, utcnow
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
from studyspark.storage.base import (
    ALL_SUBJECTS,
    RECENT_SUMMARIES_LIMIT,
    StorageRepository,
    select_upcoming_tasks,
)

logger = logging.getLogger(__name__)


def _newest_first(items):
    # reversed() first so that equal timestamps still list the later insert first
    return sorted(reversed(list(items)), key=lambda item: item.created_at, reverse=True)


class MemoryStorage(StorageRepository):
    """Dict-backed repository. Records are immutable pydantic models replaced on update."""

    backend_name = "memory"

    def __init__(self):
        self.subjects: Dict[str, SubjectResponse] = {}
        self.notes: Dict[str, NoteResponse] = {}
        self.summaries: Dict[str, SummaryResponse] = {}
        self.flashcards: Dict[str, FlashcardResponse] = {}
        self.questions: Dict[str, QuestionResponse] = {}
        self.study_plans: Dict[str, StudyPlanResponse] = {}

    # ── Counter maintenance ───────────────────────────────────────────────

    def _adjust_count(
        self, subject_id: str, field: str, delta: int, touch: bool = False
    ) -> None:
        """Shift one of the subject's counters by `delta`, floored at zero."""
        subject = self.subjects.get(subject_id)
        if subject is None:
            return
        updates = {field: max(0, getattr(subject, field) + delta)}
        if touch:
            updates["last_accessed"] = utcnow()
        self.subjects[subject_id] = subject.model_copy(update=updates)

    # ── Subjects ──────────────────────────────────────────────────────────

    async def get_subjects(self) -> List[SubjectResponse]:
        return list(self.subjects.values())

    async def get_subject(self, subject_id: str) -> Optional[SubjectResponse]:
        return self.subjects.get(subject_id)

    async def create_subject(self, data: SubjectCreate) -> SubjectResponse:
        subject = SubjectResponse(id=new_id(), last_accessed=utcnow(), **data.model_dump())
        self.subjects[subject.id] = subject
        return subject

    async def update_subject(
        self, subject_id: str, data: SubjectUpdate
    ) -> Optional[SubjectResponse]:
        subject = self.subjects.get(subject_id)
        if subject is None:
            return None
        updated = subject.model_copy(update=data.model_dump(exclude_unset=True, exclude_none=True))
        self.subjects[subject_id] = updated
        return updated

    async def delete_subject(self, subject_id: str) -> bool:
        if subject_id not in self.subjects:
            return False
        for table in (self.notes, self.summaries, self.flashcards, self.questions):
            for record_id in [k for k, v in table.items() if v.subject_id == subject_id]:
                del table[record_id]
        del self.subjects[subject_id]
        return True

    # ── Notes ─────────────────────────────────────────────────────────────

    async def get_notes(self, subject_id: Optional[str] = None) -> List[NoteResponse]:
        notes = self.notes.values()
        if subject_id and subject_id != ALL_SUBJECTS:
            return [n for n in notes if n.subject_id == subject_id]
        return list(notes)

    async def get_note(self, note_id: str) -> Optional[NoteResponse]:
        return self.notes.get(note_id)

    async def create_note(self, data: NoteCreate) -> NoteResponse:
        note = NoteResponse(id=new_id(), created_at=utcnow(), **data.model_dump())
        self.notes[note.id] = note
        self._adjust_count(note.subject_id, "notes_count", 1, touch=True)
        return note

    async def delete_note(self, note_id: str) -> bool:
        note = self.notes.pop(note_id, None)
        if note is None:
            return False
        self._adjust_count(note.subject_id, "notes_count", -1)
        return True

    # ── Summaries ─────────────────────────────────────────────────────────

    async def get_summaries(self, subject_id: Optional[str] = None) -> List[SummaryResponse]:
        summaries = self.summaries.values()
        if subject_id and subject_id != ALL_SUBJECTS:
            summaries = [s for s in summaries if s.subject_id == subject_id]
        return _newest_first(summaries)

    async def get_summary(self, summary_id: str) -> Optional[SummaryResponse]:
        return self.summaries.get(summary_id)

    async def create_summary(self, data: SummaryCreate) -> SummaryResponse:
        summary = SummaryResponse(id=new_id(), created_at=utcnow(), **data.model_dump())
        self.summaries[summary.id] = summary
        return summary

    async def delete_summary(self, summary_id: str) -> bool:
        return self.summaries.pop(summary_id, None) is not None

    # ── Flashcards ────────────────────────────────────────────────────────

    async def get_flashcards(self, subject_id: Optional[str] = None) -> List[FlashcardResponse]:
        cards = self.flashcards.values()
        if subject_id and subject_id != ALL_SUBJECTS:
            return [c for c in cards if c.subject_id == subject_id]
        return list(cards)

    async def get_flashcard(self, flashcard_id: str) -> Optional[FlashcardResponse]:
        return self.flashcards.get(flashcard_id)

    async def create_flashcard(self, data: FlashcardCreate) -> FlashcardResponse:
        card = FlashcardResponse(id=new_id(), **data.model_dump())
        self.flashcards[card.id] = card
        self._adjust_count(card.subject_id, "flashcards_count", 1)
        return card

    async def create_flashcards(self, items: List[FlashcardCreate]) -> List[FlashcardResponse]:
        created = []
        for data in items:
            card = FlashcardResponse(id=new_id(), **data.model_dump())
            self.flashcards[card.id] = card
            created.append(card)
        for subject_id, count in Counter(c.subject_id for c in created).items():
            self._adjust_count(subject_id, "flashcards_count", count)
        return created

    async def update_flashcard(
        self, flashcard_id: str, data: FlashcardUpdate
    ) -> Optional[FlashcardResponse]:
        card = self.flashcards.get(flashcard_id)
        if card is None:
            return None
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        updates["last_reviewed"] = utcnow()
        updates["times_reviewed"] = card.times_reviewed + 1
        updated = card.model_copy(update=updates)
        self.flashcards[flashcard_id] = updated
        return updated

    async def delete_flashcard(self, flashcard_id: str) -> bool:
        card = self.flashcards.pop(flashcard_id, None)
        if card is None:
            return False
        self._adjust_count(card.subject_id, "flashcards_count", -1)
        return True

    # ── Questions ─────────────────────────────────────────────────────────

    async def get_questions(self, subject_id: Optional[str] = None) -> List[QuestionResponse]:
        questions = self.questions.values()
        if subject_id and subject_id != ALL_SUBJECTS:
            return [q for q in questions if q.subject_id == subject_id]
        return list(questions)

    async def get_question(self, question_id: str) -> Optional[QuestionResponse]:
        return self.questions.get(question_id)

    async def create_question(self, data: QuestionCreate) -> QuestionResponse:
        question = QuestionResponse(id=new_id(), **data.model_dump())
        self.questions[question.id] = question
        self._adjust_count(question.subject_id, "questions_count", 1)
        return question

    async def create_questions(self, items: List[QuestionCreate]) -> List[QuestionResponse]:
        created = []
        for data in items:
            question = QuestionResponse(id=new_id(), **data.model_dump())
            self.questions[question.id] = question
            created.append(question)
        for subject_id, count in Counter(q.subject_id for q in created).items():
            self._adjust_count(subject_id, "questions_count", count)
        return created

    async def delete_question(self, question_id: str) -> bool:
        question = self.questions.pop(question_id, None)
        if question is None:
            return False
        self._adjust_count(question.subject_id, "questions_count", -1)
        return True

    # ── Study plans ───────────────────────────────────────────────────────

    async def get_study_plans(self) -> List[StudyPlanResponse]:
        return _newest_first(self.study_plans.values())

    async def get_study_plan(self, plan_id: str) -> Optional[StudyPlanResponse]:
        return self.study_plans.get(plan_id)

    async def create_study_plan(self, data: StudyPlanCreate) -> StudyPlanResponse:
        fields = data.model_dump(exclude={"tasks"})
        plan = StudyPlanResponse(
            id=new_id(),
            created_at=utcnow(),
            tasks=[StudyTask(id=new_id(), **task.model_dump()) for task in data.tasks],
            **fields,
        )
        self.study_plans[plan.id] = plan
        return plan

    async def update_study_plan_task(
        self, plan_id: str, task_id: str, data: StudyTaskUpdate
    ) -> Optional[StudyPlanResponse]:
        plan = self.study_plans.get(plan_id)
        if plan is None:
            return None
        index = next((i for i, t in enumerate(plan.tasks) if t.id == task_id), None)
        if index is None:
            return None
        tasks = list(plan.tasks)
        tasks[index] = tasks[index].model_copy(
            update=data.model_dump(exclude_unset=True, exclude_none=True)
        )
        updated = plan.model_copy(update={"tasks": tasks})
        self.study_plans[plan_id] = updated
        return updated

    async def delete_study_plan(self, plan_id: str) -> bool:
        return self.study_plans.pop(plan_id, None) is not None

    # ── Dashboard ─────────────────────────────────────────────────────────

    async def get_dashboard_stats(self) -> DashboardStats:
        return DashboardStats(
            total_subjects=len(self.subjects),
            total_notes=len(self.notes),
            total_flashcards=len(self.flashcards),
            total_questions=len(self.questions),
            study_streak=0,
            recent_summaries=_newest_first(self.summaries.values())[:RECENT_SUMMARIES_LIMIT],
            upcoming_tasks=select_upcoming_tasks(self.study_plans.values()),
        )
