"""
StudySpark Backend — Note Service Unit Tests
===============================================

What:  Tests for the upload workflow in NoteService.
How:   Real MemoryStorage and FileService (temp directory); the AI provider
       is the mocked LLM from conftest.

What we test:
    ✅ Text uploads are decoded without calling the AI provider
    ✅ PDF/image uploads go through text extraction and are cleaned up
    ✅ Content that does not match its extension is rejected up front
    ✅ Scratch files are removed even when extraction fails
    ✅ Missing fields and empty extractions raise ValidationError
    ✅ Content-only uploads (no file)
"""

import os

import pytest

from studyspark.exceptions import LLMServiceError, ValidationError
from studyspark.schemas.subject import SubjectCreate
from studyspark.services.file_service import FileService
from studyspark.services.note_service import NoteService
from studyspark.storage import MemoryStorage


@pytest.fixture
def note_service(temp_storage):
    return NoteService(files=FileService(storage_root=temp_storage))


@pytest.fixture
def memory_storage():
    return MemoryStorage()


async def _subject_id(storage):
    subject = await storage.create_subject(SubjectCreate(name="Biology", color="green"))
    return subject.id


class TestUploadNote:

    @pytest.mark.asyncio
    async def test_text_file_is_decoded(self, note_service, memory_storage, ai_gateway, mock_llm):
        subject_id = await _subject_id(memory_storage)

        note = await note_service.upload_note(
            memory_storage,
            ai_gateway,
            title="Cells",
            subject_id=subject_id,
            filename="cells.md",
            file_content=b"# Cells\nThe basic unit of life.",
        )

        assert note.content == "# Cells\nThe basic unit of life."
        assert note.file_type == "text"
        assert note.file_name == "cells.md"
        mock_llm.extract_text.assert_not_awaited()
        assert (await memory_storage.get_subject(subject_id)).notes_count == 1

    @pytest.mark.asyncio
    async def test_image_goes_through_extraction(
        self, note_service, memory_storage, ai_gateway, mock_llm, temp_storage, sample_image_bytes
    ):
        mock_llm.extract_text.return_value = "Mitochondria are the powerhouse of the cell."
        subject_id = await _subject_id(memory_storage)

        note = await note_service.upload_note(
            memory_storage,
            ai_gateway,
            title="Whiteboard",
            subject_id=subject_id,
            filename="board.jpg",
            file_content=sample_image_bytes,
            content_length=len(sample_image_bytes),
        )

        assert note.content == "Mitochondria are the powerhouse of the cell."
        assert note.file_type == "image"
        path, mime_type = mock_llm.extract_text.await_args.args
        assert mime_type == "image/jpeg"
        assert not os.path.exists(path)
        assert os.listdir(temp_storage) == []

    @pytest.mark.asyncio
    async def test_extraction_failure_still_cleans_up(
        self, note_service, memory_storage, ai_gateway, mock_llm, temp_storage, sample_pdf_bytes
    ):
        mock_llm.extract_text.side_effect = RuntimeError("vision model unavailable")
        subject_id = await _subject_id(memory_storage)

        with pytest.raises(LLMServiceError):
            await note_service.upload_note(
                memory_storage,
                ai_gateway,
                title="Chapter 1",
                subject_id=subject_id,
                filename="chapter1.pdf",
                file_content=sample_pdf_bytes,
            )

        assert os.listdir(temp_storage) == []
        assert await memory_storage.get_notes() == []

    @pytest.mark.asyncio
    async def test_empty_extraction_falls_back_to_content(
        self, note_service, memory_storage, ai_gateway, mock_llm, sample_pdf_bytes
    ):
        mock_llm.extract_text.return_value = "   "
        subject_id = await _subject_id(memory_storage)

        note = await note_service.upload_note(
            memory_storage,
            ai_gateway,
            title="Scan",
            subject_id=subject_id,
            content="Typed notes about the scan",
            filename="scan.pdf",
            file_content=sample_pdf_bytes,
        )
        assert note.content == "Typed notes about the scan"
        assert note.file_type == "pdf"

    @pytest.mark.asyncio
    async def test_nothing_extracted_raises(
        self, note_service, memory_storage, ai_gateway, sample_png_bytes
    ):
        subject_id = await _subject_id(memory_storage)
        with pytest.raises(ValidationError, match="No text could be extracted"):
            await note_service.upload_note(
                memory_storage,
                ai_gateway,
                title="Blank",
                subject_id=subject_id,
                filename="blank.png",
                file_content=sample_png_bytes,
            )

    @pytest.mark.asyncio
    async def test_content_only(self, note_service, memory_storage, ai_gateway):
        subject_id = await _subject_id(memory_storage)

        note = await note_service.upload_note(
            memory_storage,
            ai_gateway,
            title="Typed",
            subject_id=subject_id,
            content="Newton's laws of motion",
        )

        assert note.content == "Newton's laws of motion"
        assert note.file_type == "text"
        assert note.file_name is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "title,subject_id,content",
        [
            ("", "subject-1", "text"),
            ("Title", "", "text"),
            ("Title", "subject-1", None),
            ("Title", "subject-1", "   "),
        ],
    )
    async def test_missing_fields(
        self, note_service, memory_storage, ai_gateway, title, subject_id, content
    ):
        with pytest.raises(ValidationError, match="Missing required fields"):
            await note_service.upload_note(
                memory_storage,
                ai_gateway,
                title=title,
                subject_id=subject_id,
                content=content,
            )

    @pytest.mark.asyncio
    async def test_unsupported_file_rejected(self, note_service, memory_storage, ai_gateway):
        with pytest.raises(ValidationError, match="not supported"):
            await note_service.upload_note(
                memory_storage,
                ai_gateway,
                title="Slides",
                subject_id="subject-1",
                filename="slides.pptx",
                file_content=b"PK\x03\x04",
            )

    @pytest.mark.asyncio
    async def test_renamed_binary_never_reaches_disk_or_provider(
        self, note_service, memory_storage, ai_gateway, mock_llm, temp_storage
    ):
        subject_id = await _subject_id(memory_storage)

        with pytest.raises(ValidationError, match="does not match"):
            await note_service.upload_note(
                memory_storage,
                ai_gateway,
                title="Diagram",
                subject_id=subject_id,
                filename="diagram.png",
                file_content=b"MZ\x90\x00\x03\x00\x00\x00\x04\x00\x00\x00\xff\xff\x00\x00" * 8,
            )

        mock_llm.extract_text.assert_not_awaited()
        assert os.listdir(temp_storage) == []
