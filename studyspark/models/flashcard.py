"""
StudySpark Backend — Flashcard SQLAlchemy Model
=================================================

What:  ORM model for the `flashcards` table.

Review tracking:
    Every update (the frontend marks a card easy/hard) stamps last_reviewed
    and increments times_reviewed. See DatabaseStorage.update_flashcard().
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from studyspark.database import Base, UTCDateTime, new_id


class Flashcard(Base):
    """Front/back study card, optionally derived from a summary."""

    __tablename__ = "flashcards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    summary_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    front: Mapped[str] = mapped_column(Text, nullable=False)
    back: Mapped[str] = mapped_column(Text, nullable=False)
    # easy | medium | hard
    difficulty: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
    last_reviewed: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(), nullable=True
    )
    times_reviewed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    __table_args__ = (
        Index("idx_flashcards_subject_id", "subject_id"),
    )

    def __repr__(self) -> str:
        return f"<Flashcard(id={self.id}, difficulty='{self.difficulty}')>"
