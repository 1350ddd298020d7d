"""
StudySpark Backend — ORM Models
================================

One module per table. Importing this package registers every table on
`Base.metadata` (used by Alembic and DatabaseStorage.create_schema()).
"""

from studyspark.models.flashcard import Flashcard
from studyspark.models.note import Note
from studyspark.models.question import Question
from studyspark.models.study_plan import StudyPlan
from studyspark.models.subject import Subject
from studyspark.models.summary import Summary

__all__ = ["Flashcard", "Note", "Question", "StudyPlan", "Subject", "Summary"]
