"""
StudySpark Backend — Question SQLAlchemy Model
================================================

What:  ORM model for the `questions` table (practice questions).
How:   `options` is a JSON list, only populated for multiple-choice questions.
"""

from typing import List, Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studyspark.database import Base, JSONType, new_id


class Question(Base):
    """Practice question of type mcq, short, long or numerical."""

    __tablename__ = "questions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    summary_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[Optional[List[str]]] = mapped_column(JSONType, nullable=True)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    difficulty: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )

    __table_args__ = (
        Index("idx_questions_subject_id", "subject_id"),
    )

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, type='{self.type}')>"
