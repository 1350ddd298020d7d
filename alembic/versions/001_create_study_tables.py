"""Create study tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates subjects, notes, summaries, flashcards, questions and study_plans.
How:   String(36) UUID keys generated by the application; list-valued fields
       and the embedded study-plan tasks are JSONB on PostgreSQL.
       No foreign keys: cascade deletes are done by the storage layer.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True, nullable=False)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "subjects",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("icon", sa.Text(), nullable=False, server_default="book"),
        sa.Column("color", sa.Text(), nullable=False, server_default="blue"),
        sa.Column("notes_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("flashcards_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("questions_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "last_accessed",
            sa.DateTime(timezone=True),
            nullable=True,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )

    op.create_table(
        "notes",
        _id(),
        sa.Column("subject_id", sa.String(36), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("file_type", sa.Text(), nullable=False, server_default="text"),
        sa.Column("file_name", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("idx_notes_subject_id", "notes", ["subject_id"])

    op.create_table(
        "summaries",
        _id(),
        sa.Column("note_id", sa.String(36), nullable=False),
        sa.Column("subject_id", sa.String(36), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("key_points", JSON, nullable=False),
        sa.Column("definitions", JSON, nullable=False),
        sa.Column("formulas", JSON, nullable=False),
        sa.Column("main_concepts", JSON, nullable=False),
        sa.Column("full_summary", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("idx_summaries_created_at", "summaries", [sa.text("created_at DESC")])
    op.create_index("idx_summaries_subject_id", "summaries", ["subject_id"])

    op.create_table(
        "flashcards",
        _id(),
        sa.Column("subject_id", sa.String(36), nullable=False),
        sa.Column("summary_id", sa.String(36), nullable=True),
        sa.Column("front", sa.Text(), nullable=False),
        sa.Column("back", sa.Text(), nullable=False),
        sa.Column("difficulty", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("last_reviewed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("times_reviewed", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )
    op.create_index("idx_flashcards_subject_id", "flashcards", ["subject_id"])

    op.create_table(
        "questions",
        _id(),
        sa.Column("subject_id", sa.String(36), nullable=False),
        sa.Column("summary_id", sa.String(36), nullable=True),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("options", JSON, nullable=True),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("difficulty", sa.String(16), nullable=False, server_default="medium"),
    )
    op.create_index("idx_questions_subject_id", "questions", ["subject_id"])

    op.create_table(
        "study_plans",
        _id(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("start_date", sa.String(10), nullable=False),
        sa.Column("end_date", sa.String(10), nullable=False),
        sa.Column("tasks", JSON, nullable=False),
        _created_at(),
    )


def downgrade() -> None:
    op.drop_table("study_plans")
    op.drop_index("idx_questions_subject_id", table_name="questions")
    op.drop_table("questions")
    op.drop_index("idx_flashcards_subject_id", table_name="flashcards")
    op.drop_table("flashcards")
    op.drop_index("idx_summaries_subject_id", table_name="summaries")
    op.drop_index("idx_summaries_created_at", table_name="summaries")
    op.drop_table("summaries")
    op.drop_index("idx_notes_subject_id", table_name="notes")
    op.drop_table("notes")
    op.drop_table("subjects")
