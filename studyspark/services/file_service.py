"""
StudySpark Backend — Upload File Service
==========================================

What:  Validates uploaded note files and manages their scratch copies on disk.
Why:   Centralizes all file system operations and upload checks in one place.
How:   Extension whitelist and size limit first; text files are decoded in
       memory, PDFs and images are written under STORAGE_ROOT with a UUID name
       so the AI provider can read them, then removed.
Who:   Called by NoteService during POST /api/notes/upload.

Security Model:
    1. Extension check: only formats the app can turn into text
    2. Content check:   PDF/image magic bytes must match the extension (libmagic)
    3. Size check:      bounded by MAX_FILE_SIZE, checked before reading
    4. UUID filename:   no user input reaches the file system path
    5. Scratch only:    nothing stays on disk after the request
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import magic

from studyspark.config import settings
from studyspark.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# Extension → MIME type libmagic must detect (text types are decoded instead)
ALLOWED_EXTENSIONS = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

TEXT_EXTENSIONS = {".txt", ".md"}

# libmagic only needs the header; enough for PDF and every image format above
MAGIC_HEADER_BYTES = 2048


class FileService:
    """
    Upload validation plus the scratch-file lifecycle.

    Lifecycle of an uploaded PDF/image:
        1. validate_extension() / validate_size() / validate_content()
        2. store_file() writes <storage_root>/<uuid><ext>
        3. The AI Gateway reads it
        4. cleanup_file() removes it, whatever the outcome
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                         If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_declared_size(self, content_length: Optional[int]) -> None:
        """
        Reject an upload whose declared size is over the limit.

        Runs before the body is read, so oversized files are never loaded
        into memory.
        """
        if content_length and content_length > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller file.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate file size against configured maximum.

        Args:
            content_length: Size reported for the upload (may be None or inaccurate)
            actual_size: Actual byte count of the uploaded file
        """
        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

        self.validate_declared_size(content_length)

        if actual_size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_content(self, file_content: bytes, extension: str) -> str:
        """
        Check a PDF/image's magic bytes against its extension.

        How:     python-magic reads the header, so a renamed binary with a
                 .pdf or .png name is rejected before it is written to disk
                 or sent to the AI provider. Text files are not checked here;
                 decode_text() rejects anything that is not UTF-8.
        Returns: The detected MIME type.
        Raises:  ValidationError if the content does not match the extension.
        """
        try:
            mime_type = magic.from_buffer(file_content[:MAGIC_HEADER_BYTES], mime=True)
        except magic.MagicException as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        expected = ALLOWED_EXTENSIONS[extension]
        if mime_type != expected:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' does not match the '{extension}' "
                    f"extension. The file must be a valid {expected} file."
                ),
                field="file",
                context={"detected_mime": mime_type, "expected_mime": expected},
            )
        return mime_type

    @staticmethod
    def is_text(extension: str) -> bool:
        return extension in TEXT_EXTENSIONS

    @staticmethod
    def file_type_for(extension: str) -> str:
        """Note.file_type for an upload: text, pdf or image."""
        if extension in TEXT_EXTENSIONS:
            return "text"
        if extension == ".pdf":
            return "pdf"
        return "image"

    @staticmethod
    def decode_text(content: bytes, filename: str) -> str:
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ValidationError(
                message=f"'{filename}' is not valid UTF-8 text.",
                field="file",
            )

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write the upload to a UUID-named scratch file.

        Returns: Absolute path of the written file.
        Raises:  FileStorageError if the write fails.
        """
        absolute_path = self.storage_root / f"{uuid.uuid4()}{extension}"
        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )
        logger.info("File stored: %s (%d bytes)", absolute_path.name, len(content))
        return str(absolute_path)

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a scratch file if it exists.

        A failed delete is logged, not raised; the request already has its result.
        """
        path = Path(file_path)
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", path.name, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
