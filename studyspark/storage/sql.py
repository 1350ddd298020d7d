"""
StudySpark Backend — Database Storage (SQLAlchemy)
====================================================

What:  StorageRepository backed by an async SQLAlchemy engine.
When:  Selected when DATABASE_URL is configured. PostgreSQL (asyncpg) in
       production; the test-suite runs the same code against SQLite (aiosqlite).
How:   Every public method opens its own session through `_session()`, which
       commits on success and rolls back on failure. ORM rows are converted to
       response schemas before the session closes (expire_on_commit=False).

Error Handling:
    SQLAlchemyError is logged with the operation name and re-raised as
    DatabaseError (HTTP 500, generic message). No retries.

Counters:
    Subject counters are maintained read-then-write inside the same
    transaction as the child insert/delete. Two concurrent creates for one
    subject can still lose an increment; see DESIGN.md.
"""

import logging
from collections import Counter
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Type

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from studyspark.database import Base, create_engine, create_session_factory, new_id, utcnow
from studyspark.exceptions import DatabaseError
from studyspark.models import Flashcard, Note, Question, StudyPlan, Subject, Summary
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


class DatabaseStorage(StorageRepository):
    """
    Relational repository, one table per entity (see studyspark.models).

    Args:
        database_url: Async SQLAlchemy URL. Defaults to settings.database_url.
        engine: Pre-built engine (tests); takes precedence over database_url.
    """

    backend_name = "database"

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[AsyncEngine] = None,
    ):
        self.engine = engine or create_engine(database_url)
        self.session_factory: async_sessionmaker[AsyncSession] = create_session_factory(
            self.engine
        )
        logger.info("DatabaseStorage initialized (dialect=%s)", self.engine.dialect.name)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Session scoped to one repository call.

        Commits when the block exits cleanly; on SQLAlchemyError rolls back
        and raises DatabaseError tagged with `operation`.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
                raise DatabaseError(context={"operation": operation, "error_type": type(e).__name__})

    async def create_schema(self) -> None:
        """Create every table on the bound engine. Used by tests; production uses Alembic."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database health check failed: %s", str(e))
            return False

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    async def _adjust_count(
        session: AsyncSession,
        subject_id: str,
        field: str,
        delta: int,
        touch: bool = False,
    ) -> None:
        """Read the subject, then write its counter shifted by `delta` (floored at 0)."""
        subject = await session.get(Subject, subject_id)
        if subject is None:
            return
        setattr(subject, field, max(0, (getattr(subject, field) or 0) + delta))
        if touch:
            subject.last_accessed = utcnow()

    @staticmethod
    async def _list(session: AsyncSession, model: Type[Base], subject_id: Optional[str]):
        query = select(model)
        if subject_id and subject_id != ALL_SUBJECTS:
            query = query.where(model.subject_id == subject_id)
        result = await session.execute(query)
        return result.scalars().all()

    # ── Subjects ──────────────────────────────────────────────────────────

    async def get_subjects(self) -> List[SubjectResponse]:
        async with self._session("get_subjects") as session:
            result = await session.execute(select(Subject))
            return [SubjectResponse.model_validate(s) for s in result.scalars().all()]

    async def get_subject(self, subject_id: str) -> Optional[SubjectResponse]:
        async with self._session("get_subject") as session:
            subject = await session.get(Subject, subject_id)
            return SubjectResponse.model_validate(subject) if subject else None

    async def create_subject(self, data: SubjectCreate) -> SubjectResponse:
        async with self._session("create_subject") as session:
            subject = Subject(id=new_id(), last_accessed=utcnow(), **data.model_dump())
            session.add(subject)
            await session.flush()
            return SubjectResponse.model_validate(subject)

    async def update_subject(
        self, subject_id: str, data: SubjectUpdate
    ) -> Optional[SubjectResponse]:
        async with self._session("update_subject") as session:
            subject = await session.get(Subject, subject_id)
            if subject is None:
                return None
            for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(subject, field, value)
            await session.flush()
            return SubjectResponse.model_validate(subject)

    async def delete_subject(self, subject_id: str) -> bool:
        async with self._session("delete_subject") as session:
            subject = await session.get(Subject, subject_id)
            if subject is None:
                return False
            for model in (Note, Summary, Flashcard, Question):
                await session.execute(delete(model).where(model.subject_id == subject_id))
            await session.delete(subject)
            logger.info("Deleted subject %s with all child records", subject_id)
            return True

    # ── Notes ─────────────────────────────────────────────────────────────

    async def get_notes(self, subject_id: Optional[str] = None) -> List[NoteResponse]:
        async with self._session("get_notes") as session:
            query = select(Note)
            if subject_id and subject_id != ALL_SUBJECTS:
                query = query.where(Note.subject_id == subject_id)
            result = await session.execute(query)
            return [NoteResponse.model_validate(n) for n in result.scalars().all()]

    async def get_note(self, note_id: str) -> Optional[NoteResponse]:
        async with self._session("get_note") as session:
            note = await session.get(Note, note_id)
            return NoteResponse.model_validate(note) if note else None

    async def create_note(self, data: NoteCreate) -> NoteResponse:
        async with self._session("create_note") as session:
            note = Note(id=new_id(), created_at=utcnow(), **data.model_dump())
            session.add(note)
            await session.flush()
            await self._adjust_count(session, note.subject_id, "notes_count", 1, touch=True)
            return NoteResponse.model_validate(note)

    async def delete_note(self, note_id: str) -> bool:
        async with self._session("delete_note") as session:
            note = await session.get(Note, note_id)
            if note is None:
                return False
            await session.delete(note)
            await self._adjust_count(session, note.subject_id, "notes_count", -1)
            return True

    # ── Summaries ─────────────────────────────────────────────────────────

    async def get_summaries(self, subject_id: Optional[str] = None) -> List[SummaryResponse]:
        async with self._session("get_summaries") as session:
            query = select(Summary).order_by(Summary.created_at.desc())
            if subject_id and subject_id != ALL_SUBJECTS:
                query = query.where(Summary.subject_id == subject_id)
            result = await session.execute(query)
            return [SummaryResponse.model_validate(s) for s in result.scalars().all()]

    async def get_summary(self, summary_id: str) -> Optional[SummaryResponse]:
        async with self._session("get_summary") as session:
            summary = await session.get(Summary, summary_id)
            return SummaryResponse.model_validate(summary) if summary else None

    async def create_summary(self, data: SummaryCreate) -> SummaryResponse:
        async with self._session("create_summary") as session:
            summary = Summary(id=new_id(), created_at=utcnow(), **data.model_dump())
            session.add(summary)
            await session.flush()
            return SummaryResponse.model_validate(summary)

    async def delete_summary(self, summary_id: str) -> bool:
        async with self._session("delete_summary") as session:
            result = await session.execute(delete(Summary).where(Summary.id == summary_id))
            return result.rowcount > 0

    # ── Flashcards ────────────────────────────────────────────────────────

    async def get_flashcards(self, subject_id: Optional[str] = None) -> List[FlashcardResponse]:
        async with self._session("get_flashcards") as session:
            rows = await self._list(session, Flashcard, subject_id)
            return [FlashcardResponse.model_validate(c) for c in rows]

    async def get_flashcard(self, flashcard_id: str) -> Optional[FlashcardResponse]:
        async with self._session("get_flashcard") as session:
            card = await session.get(Flashcard, flashcard_id)
            return FlashcardResponse.model_validate(card) if card else None

    async def create_flashcard(self, data: FlashcardCreate) -> FlashcardResponse:
        return (await self.create_flashcards([data]))[0]

    async def create_flashcards(self, items: List[FlashcardCreate]) -> List[FlashcardResponse]:
        if not items:
            return []
        async with self._session("create_flashcards") as session:
            cards = [Flashcard(id=new_id(), times_reviewed=0, **data.model_dump()) for data in items]
            session.add_all(cards)
            await session.flush()
            for subject_id, count in Counter(c.subject_id for c in cards).items():
                await self._adjust_count(session, subject_id, "flashcards_count", count)
            logger.info("Stored %d flashcards", len(cards))
            return [FlashcardResponse.model_validate(c) for c in cards]

    async def update_flashcard(
        self, flashcard_id: str, data: FlashcardUpdate
    ) -> Optional[FlashcardResponse]:
        async with self._session("update_flashcard") as session:
            card = await session.get(Flashcard, flashcard_id)
            if card is None:
                return None
            for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(card, field, value)
            card.last_reviewed = utcnow()
            card.times_reviewed = (card.times_reviewed or 0) + 1
            await session.flush()
            return FlashcardResponse.model_validate(card)

    async def delete_flashcard(self, flashcard_id: str) -> bool:
        async with self._session("delete_flashcard") as session:
            card = await session.get(Flashcard, flashcard_id)
            if card is None:
                return False
            await session.delete(card)
            await self._adjust_count(session, card.subject_id, "flashcards_count", -1)
            return True

    # ── Questions ─────────────────────────────────────────────────────────

    async def get_questions(self, subject_id: Optional[str] = None) -> List[QuestionResponse]:
        async with self._session("get_questions") as session:
            rows = await self._list(session, Question, subject_id)
            return [QuestionResponse.model_validate(q) for q in rows]

    async def get_question(self, question_id: str) -> Optional[QuestionResponse]:
        async with self._session("get_question") as session:
            question = await session.get(Question, question_id)
            return QuestionResponse.model_validate(question) if question else None

    async def create_question(self, data: QuestionCreate) -> QuestionResponse:
        return (await self.create_questions([data]))[0]

    async def create_questions(self, items: List[QuestionCreate]) -> List[QuestionResponse]:
        if not items:
            return []
        async with self._session("create_questions") as session:
            questions = [Question(id=new_id(), **data.model_dump()) for data in items]
            session.add_all(questions)
            await session.flush()
            for subject_id, count in Counter(q.subject_id for q in questions).items():
                await self._adjust_count(session, subject_id, "questions_count", count)
            logger.info("Stored %d questions", len(questions))
            return [QuestionResponse.model_validate(q) for q in questions]

    async def delete_question(self, question_id: str) -> bool:
        async with self._session("delete_question") as session:
            question = await session.get(Question, question_id)
            if question is None:
                return False
            await session.delete(question)
            await self._adjust_count(session, question.subject_id, "questions_count", -1)
            return True

    # ── Study plans ───────────────────────────────────────────────────────

    async def get_study_plans(self) -> List[StudyPlanResponse]:
        async with self._session("get_study_plans") as session:
            result = await session.execute(
                select(StudyPlan).order_by(StudyPlan.created_at.desc())
            )
            return [StudyPlanResponse.model_validate(p) for p in result.scalars().all()]

    async def get_study_plan(self, plan_id: str) -> Optional[StudyPlanResponse]:
        async with self._session("get_study_plan") as session:
            plan = await session.get(StudyPlan, plan_id)
            return StudyPlanResponse.model_validate(plan) if plan else None

    async def create_study_plan(self, data: StudyPlanCreate) -> StudyPlanResponse:
        async with self._session("create_study_plan") as session:
            tasks = [
                StudyTask(id=new_id(), **task.model_dump()).model_dump(by_alias=True)
                for task in data.tasks
            ]
            plan = StudyPlan(
                id=new_id(),
                created_at=utcnow(),
                tasks=tasks,
                **data.model_dump(exclude={"tasks"}),
            )
            session.add(plan)
            await session.flush()
            return StudyPlanResponse.model_validate(plan)

    async def update_study_plan_task(
        self, plan_id: str, task_id: str, data: StudyTaskUpdate
    ) -> Optional[StudyPlanResponse]:
        async with self._session("update_study_plan_task") as session:
            plan = await session.get(StudyPlan, plan_id)
            if plan is None:
                return None
            tasks = [dict(task) for task in plan.tasks or []]
            index = next((i for i, t in enumerate(tasks) if t.get("id") == task_id), None)
            if index is None:
                return None
            tasks[index].update(data.model_dump(exclude_unset=True, exclude_none=True, by_alias=True))
            # New list object so the JSON column is flagged dirty
            plan.tasks = tasks
            await session.flush()
            return StudyPlanResponse.model_validate(plan)

    async def delete_study_plan(self, plan_id: str) -> bool:
        async with self._session("delete_study_plan") as session:
            result = await session.execute(delete(StudyPlan).where(StudyPlan.id == plan_id))
            return result.rowcount > 0

    # ── Dashboard ─────────────────────────────────────────────────────────

    async def get_dashboard_stats(self) -> DashboardStats:
        async with self._session("get_dashboard_stats") as session:
            totals = {}
            for key, model in (
                ("total_subjects", Subject),
                ("total_notes", Note),
                ("total_flashcards", Flashcard),
                ("total_questions", Question),
            ):
                totals[key] = (
                    await session.execute(select(func.count()).select_from(model))
                ).scalar_one()

            summaries = await session.execute(
                select(Summary).order_by(Summary.created_at.desc()).limit(RECENT_SUMMARIES_LIMIT)
            )
            plans = await session.execute(select(StudyPlan))

            return DashboardStats(
                **totals,
                study_streak=0,
                recent_summaries=[
                    SummaryResponse.model_validate(s) for s in summaries.scalars().all()
                ],
                upcoming_tasks=select_upcoming_tasks(
                    StudyPlanResponse.model_validate(p) for p in plans.scalars().all()
                ),
            )
