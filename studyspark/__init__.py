"""
StudySpark Backend — Application Package Initializer
=====================================================

What: Marks the `studyspark` directory as a Python package.
Who:  Imported by uvicorn (`studyspark.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (AI Gateway, uploads)     │  ← Prompts, parsing, orchestration
    ├─────────────────────────────────────┤
    │   Storage Repository (mem | SQL)    │  ← CRUD + denormalized counters
    ├─────────────────────────────────────┤
    │  Models & Schemas (Data contracts)  │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Routes only ever see the StorageRepository interface, so the in-memory
    and database-backed stores are interchangeable at startup.
"""

__version__ = "1.0.0"
