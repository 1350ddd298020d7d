"""
StudySpark Backend — Subject SQLAlchemy Model
===============================================

What:  ORM model for the `subjects` table.
Who:   Used by DatabaseStorage for CRUD and counter maintenance.

Denormalized counters:
    notes_count / flashcards_count / questions_count mirror the number of
    child rows pointing at the subject. They are written by the storage layer
    on every child insert/delete (read, then write), not by triggers.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from studyspark.database import Base, UTCDateTime, new_id, utcnow


class Subject(Base):
    """A course or topic that owns notes, summaries, flashcards and questions."""

    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    # Frontend icon key and palette colour
    icon: Mapped[str] = mapped_column(Text, nullable=False, default="book", server_default="book")
    color: Mapped[str] = mapped_column(Text, nullable=False, default="blue", server_default="blue")

    # ── Denormalized counters ─────────────────────────────────────────────
    notes_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    flashcards_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    questions_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    last_accessed: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name='{self.name}')>"
