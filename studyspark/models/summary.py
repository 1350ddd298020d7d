"""
StudySpark Backend — Summary SQLAlchemy Model
===============================================

What:  ORM model for the `summaries` table, one row per AI summary of a note.
How:   List-valued fields live in JSON columns (JSONB on PostgreSQL).

    key_points     ["...", ...]
    definitions    [{"term": "...", "definition": "..."}, ...]
    formulas       ["...", ...]
    main_concepts  ["...", ...]
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from studyspark.database import Base, JSONType, UTCDateTime, new_id, utcnow


class Summary(Base):
    """Structured summary generated from a note by the AI Gateway."""

    __tablename__ = "summaries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    note_id: Mapped[str] = mapped_column(String(36), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    key_points: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    definitions: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONType, nullable=False, default=list
    )
    formulas: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    main_concepts: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    full_summary: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Dashboard and list views read newest first
    __table_args__ = (
        Index("idx_summaries_created_at", created_at.desc()),
        Index("idx_summaries_subject_id", "subject_id"),
    )

    def __repr__(self) -> str:
        return f"<Summary(id={self.id}, note_id={self.note_id}, title='{self.title}')>"
