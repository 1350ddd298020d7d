"""
StudySpark Backend — Note SQLAlchemy Model
============================================

What:  ORM model for the `notes` table: raw study material a summary is built from.

Table Design Rationale:
    - content: Full text (TEXT, no length limit). Text extracted from uploaded
      PDFs/images is stored here too; the original file is not kept.
    - file_type: 'text', 'pdf', 'image' (where the content came from)
    - subject_id: Plain column, no FK constraint; cascade is done in code
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from studyspark.database import Base, UTCDateTime, new_id, utcnow


class Note(Base):
    """Uploaded or typed study material belonging to one subject."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(
        Text, nullable=False, default="text", server_default="text"
    )
    file_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_notes_subject_id", "subject_id"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, subject_id={self.subject_id}, title='{self.title}')>"
