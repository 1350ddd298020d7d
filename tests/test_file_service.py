"""
StudySpark Backend — File Service Unit Tests
===============================================

What:  Tests for FileService validation and scratch-file handling.
Why:   File validation is the boundary between user uploads and the disk.
How:   Temporary directories per test; no real uploads needed.

Test Strategy:
    ✅ Allowed extensions (.txt .md .pdf .png .jpg .jpeg .gif .webp), any case
    ✅ Rejected extensions (.exe, .docx, no extension)
    ✅ Size limits (empty, declared and actual size over MAX_FILE_SIZE)
    ✅ Magic-byte content check for PDFs and images
    ✅ UTF-8 decoding of text uploads
    ✅ UUID filenames, cleanup of scratch files
"""

import os
from pathlib import Path
from unittest.mock import patch

import magic
import pytest

from studyspark.config import settings
from studyspark.exceptions import FileStorageError, ValidationError
from studyspark.services.file_service import FileService


class TestFileValidation:
    """Extension and size checks."""

    def setup_method(self):
        self.service = FileService()

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("lecture.txt", ".txt"),
            ("README.md", ".md"),
            ("chapter1.pdf", ".pdf"),
            ("board.png", ".png"),
            ("photo.JPG", ".jpg"),
            ("photo.Jpeg", ".jpeg"),
            ("diagram.gif", ".gif"),
            ("scan.webp", ".webp"),
        ],
    )
    def test_allowed_extensions(self, filename, expected):
        assert self.service.validate_extension(filename) == expected

    @pytest.mark.parametrize("filename", ["malware.exe", "essay.docx", "noextension", ""])
    def test_rejected_extensions(self, filename):
        with pytest.raises(ValidationError, match="not supported"):
            self.service.validate_extension(filename)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(None, 0)

    def test_within_limit(self):
        # Should not raise
        self.service.validate_size(1024, 1024)
        self.service.validate_size(None, settings.max_file_size)

    def test_declared_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(settings.max_file_size + 1, 100)

    def test_declared_size_checked_alone(self):
        # Should not raise
        self.service.validate_declared_size(None)
        self.service.validate_declared_size(settings.max_file_size)
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_declared_size(settings.max_file_size + 1)

    def test_actual_size_over_limit(self):
        with pytest.raises(ValidationError, match="exceeds maximum"):
            self.service.validate_size(None, settings.max_file_size + 1)

    def test_file_type_mapping(self):
        assert self.service.file_type_for(".md") == "text"
        assert self.service.file_type_for(".pdf") == "pdf"
        assert self.service.file_type_for(".webp") == "image"
        assert self.service.is_text(".txt")
        assert not self.service.is_text(".pdf")


class TestContentValidation:
    """Magic-byte checks for PDFs and images (libmagic via python-magic)."""

    def setup_method(self):
        self.service = FileService()

    def test_matching_content(self, sample_image_bytes, sample_png_bytes, sample_pdf_bytes):
        assert self.service.validate_content(sample_image_bytes, ".jpg") == "image/jpeg"
        assert self.service.validate_content(sample_image_bytes, ".jpeg") == "image/jpeg"
        assert self.service.validate_content(sample_png_bytes, ".png") == "image/png"
        assert self.service.validate_content(sample_pdf_bytes, ".pdf") == "application/pdf"

    def test_renamed_executable_rejected(self):
        exe = b"MZ\x90\x00\x03\x00\x00\x00\x04\x00\x00\x00\xff\xff\x00\x00" * 8
        with pytest.raises(ValidationError, match="does not match the '.png' extension"):
            self.service.validate_content(exe, ".png")

    def test_image_under_wrong_extension_rejected(self, sample_image_bytes):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_content(sample_image_bytes, ".pdf")
        assert exc_info.value.context["detected_mime"] == "image/jpeg"
        assert exc_info.value.context["expected_mime"] == "application/pdf"

    def test_detection_failure_is_storage_error(self, sample_png_bytes):
        with patch(
            "studyspark.services.file_service.magic.from_buffer",
            side_effect=magic.MagicException("cannot load magic database"),
        ):
            with pytest.raises(FileStorageError):
                self.service.validate_content(sample_png_bytes, ".png")


class TestDecodeText:

    def test_utf8_with_bom(self):
        raw = "\ufeffPhotosynthesis: light → sugar".encode("utf-8")
        assert FileService.decode_text(raw, "notes.txt") == "Photosynthesis: light → sugar"

    def test_invalid_utf8(self):
        with pytest.raises(ValidationError, match="not valid UTF-8"):
            FileService.decode_text(b"\xff\xfe\x00bad", "notes.txt")


class TestFileStorage:
    """Scratch files on disk."""

    @pytest.mark.asyncio
    async def test_store_and_cleanup(self, temp_storage, sample_image_bytes):
        service = FileService(storage_root=temp_storage)

        path = await service.store_file(sample_image_bytes, ".jpg")

        stored = Path(path)
        assert stored.is_absolute()
        assert stored.parent == Path(temp_storage).resolve()
        assert stored.suffix == ".jpg"
        assert len(stored.stem) == 36  # UUID4 with hyphens
        assert stored.read_bytes() == sample_image_bytes

        await service.cleanup_file(path)
        assert not stored.exists()

    @pytest.mark.asyncio
    async def test_unique_names(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        first = await service.store_file(b"a", ".png")
        second = await service.store_file(b"a", ".png")
        assert first != second
        assert len(os.listdir(temp_storage)) == 2

    @pytest.mark.asyncio
    async def test_cleanup_missing_file_is_silent(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        # Should not raise
        await service.cleanup_file(os.path.join(temp_storage, "gone.png"))

    @pytest.mark.asyncio
    async def test_write_failure_raises_storage_error(self, temp_storage):
        service = FileService(storage_root=temp_storage)
        with patch("studyspark.services.file_service.aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError):
                await service.store_file(b"data", ".pdf")
