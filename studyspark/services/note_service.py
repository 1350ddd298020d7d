"""
StudySpark Backend — Note Upload Service
==========================================

What:  Orchestrates POST /api/notes/upload: validate → extract text → store note.
Why:   Keeps multipart/file concerns out of the route handler and the storage layer.
How:   Composes FileService, the AI Gateway (for PDFs/images) and the
       StorageRepository chosen at startup.

Orchestration Flow:
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │  Upload  │───▶│  Validate   │───▶│  Extract     │───▶│  Store   │
    │  (Route) │    │ (FileServ)  │    │  text (AI)   │    │ (Repo)   │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    Text files skip the AI step (decoded as UTF-8). Scratch files are
    always removed, whether extraction succeeds or fails.
"""

import logging
from typing import Optional, Tuple

from studyspark.exceptions import ValidationError
from studyspark.schemas.note import NoteCreate, NoteResponse
from studyspark.services.ai_service import AIGateway
from studyspark.services.file_service import FileService, file_service as default_file_service
from studyspark.storage.base import StorageRepository

logger = logging.getLogger(__name__)


class NoteService:
    """
    Upload workflow for notes.

    Stateless apart from the FileService; storage and gateway are passed per
    call because they live on app.state.
    """

    def __init__(self, files: Optional[FileService] = None):
        self.files = files or default_file_service

    async def _extract(
        self,
        ai_gateway: AIGateway,
        filename: str,
        file_content: bytes,
        content_length: Optional[int],
    ) -> Tuple[str, str]:
        """Validated text of the uploaded file and the note file_type it implies."""
        ext = self.files.validate_extension(filename)
        self.files.validate_size(content_length, len(file_content))

        if self.files.is_text(ext):
            return self.files.decode_text(file_content, filename), "text"

        mime_type = self.files.validate_content(file_content, ext)
        absolute_path = await self.files.store_file(file_content, ext)
        try:
            text = await ai_gateway.extract_note_text(absolute_path, mime_type)
        finally:
            await self.files.cleanup_file(absolute_path)
        logger.info("Extracted %d chars from %s upload", len(text), ext)
        return text, self.files.file_type_for(ext)

    async def upload_note(
        self,
        storage: StorageRepository,
        ai_gateway: AIGateway,
        *,
        title: str,
        subject_id: str,
        content: Optional[str] = None,
        file_type: Optional[str] = None,
        filename: Optional[str] = None,
        file_content: Optional[bytes] = None,
        content_length: Optional[int] = None,
    ) -> NoteResponse:
        """
        Create a note from a multipart upload.

        Raises:
            ValidationError: Missing title/subject, no file and no content,
                             bad extension or size, undecodable text
            LLMServiceError: The provider failed to read a PDF/image
            FileStorageError: Scratch file could not be written
        """
        title = (title or "").strip()
        subject_id = (subject_id or "").strip()
        has_file = bool(filename) and file_content is not None

        if not title or not subject_id or (not has_file and not (content or "").strip()):
            raise ValidationError(message="Missing required fields")

        if has_file:
            text, detected_type = await self._extract(
                ai_gateway, filename, file_content, content_length
            )
            if not text.strip():
                text = content or ""
            if not text.strip():
                raise ValidationError(
                    message="No text could be extracted from the uploaded file.",
                    field="file",
                )
            note_data = NoteCreate(
                subject_id=subject_id,
                title=title,
                content=text,
                file_type=detected_type,
                file_name=filename,
            )
        else:
            note_data = NoteCreate(
                subject_id=subject_id,
                title=title,
                content=content,
                file_type=file_type or "text",
            )

        note = await storage.create_note(note_data)
        logger.info("Note %s stored (file_type=%s)", note.id, note.file_type)
        return note


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
