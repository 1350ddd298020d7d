"""
StudySpark Backend — Study Plan SQLAlchemy Model
==================================================

What:  ORM model for the `study_plans` table.

Embedded tasks:
    Tasks are not a table. They are stored as an ordered JSON list on the plan
    row, each item shaped like the API's StudyTask (camelCase keys):

        {"id": "...", "topic": "...", "subject": "...", "duration": "1 hour",
         "priority": "high", "completed": false, "date": "2024-01-15",
         "timeSlot": "Morning"}

    Updating one task rewrites the whole list (see update_study_plan_task).
    start_date / end_date are ISO date strings, matching the task dates.
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from studyspark.database import Base, JSONType, UTCDateTime, new_id, utcnow


class StudyPlan(Base):
    """AI-generated schedule with its task list embedded."""

    __tablename__ = "study_plans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[str] = mapped_column(String(10), nullable=False)
    end_date: Mapped[str] = mapped_column(String(10), nullable=False)
    tasks: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<StudyPlan(id={self.id}, title='{self.title}', tasks={len(self.tasks or [])})>"
