"""
StudySpark Backend — Pydantic Request/Response Schemas
=======================================================

What:  The API contract between the React frontend and this backend.
How:   Every model inherits CamelModel, so JSON uses camelCase
       (`subjectId`, `notesCount`) while Python code uses snake_case.
       Storage backends return these response models directly.
"""
