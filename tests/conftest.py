"""
StudySpark Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pinned before any studyspark import so Settings never
       sees a real DATABASE_URL or API key.

Fixture Hierarchy:
    ├── storage:        each storage test runs twice, on MemoryStorage and on
    │                   DatabaseStorage over a throwaway SQLite file (aiosqlite)
    ├── mock_llm:       AsyncMock standing in for the LLM provider
    ├── ai_gateway:     AIGateway over mock_llm
    ├── temp_storage:   scratch directory for upload tests
    ├── sample_*_bytes: minimal JPEG/PNG/PDF files with real magic bytes
    └── test_client:    httpx AsyncClient bound to a fresh app (in-memory storage)
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ.pop("DATABASE_URL", None)
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="studyspark_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from studyspark.main import create_app  # noqa: E402
from studyspark.services.ai_service import AIGateway  # noqa: E402
from studyspark.services.llm_base import LLMService  # noqa: E402
from studyspark.storage import DatabaseStorage, MemoryStorage  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Storage Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def storage(request, tmp_path):
    """
    A fresh, empty repository per test, once per backend.

    The SQLite variant exercises the real DatabaseStorage code path
    (sessions, JSON columns, cascade statements) without PostgreSQL.
    """
    if request.param == "memory":
        yield MemoryStorage()
        return

    repo = DatabaseStorage(f"sqlite+aiosqlite:///{tmp_path / 'studyspark_test.db'}")
    await repo.create_schema()
    try:
        yield repo
    finally:
        await repo.close()


# ══════════════════════════════════════════════════════════════════════════
# AI Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_llm():
    """
    LLM provider double. By default every completion returns "{}".

    Usage:
        mock_llm.complete.return_value = json.dumps({"flashcards": [...]})
    """
    llm = AsyncMock(spec=LLMService)
    llm.complete.return_value = "{}"
    llm.extract_text.return_value = ""
    llm.health_check.return_value = True
    return llm


@pytest.fixture
def ai_gateway(mock_llm):
    return AIGateway(mock_llm)


# ══════════════════════════════════════════════════════════════════════════
# Upload / HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    """Fresh scratch directory for file service tests."""
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """1x1 RGB PNG: signature + IHDR + IEND (enough for libmagic)."""
    return (
        b'\x89PNG\r\n\x1a\n'
        b'\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00\x90wS\xde'
        b'\x00\x00\x00\x00IEND\xaeB`\x82'
    )


@pytest.fixture
def sample_pdf_bytes():
    """Header and trailer of an empty PDF."""
    return b'%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n'


@pytest.fixture
def app(ai_gateway):
    """App wired to in-memory storage and the mocked gateway."""
    return create_app(storage=MemoryStorage(), ai_gateway=ai_gateway)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    raise_app_exceptions=False lets the catch-all handler's 500 reach the test.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
