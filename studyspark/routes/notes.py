"""
StudySpark Backend — Note Route Handlers
==========================================

What:  Note listing/detail/deletion, JSON creation and multipart upload.
How:   JSON creation goes straight to storage; uploads go through NoteService
       (validation, text extraction, scratch-file cleanup).
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from studyspark.dependencies import get_ai_gateway, get_storage
from studyspark.exceptions import NotFoundError
from studyspark.schemas.base import ErrorResponse
from studyspark.schemas.note import NoteCreate, NoteResponse
from studyspark.services.ai_service import AIGateway
from studyspark.services.note_service import note_service
from studyspark.storage.base import StorageRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Notes"])

NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


@router.get("", response_model=List[NoteResponse], summary="List notes")
async def list_notes(
    subject_id: Optional[str] = Query(default=None, alias="subjectId"),
    storage: StorageRepository = Depends(get_storage),
):
    return await storage.get_notes(subject_id)


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses=NOT_FOUND,
    summary="Get a single note",
)
async def get_note(note_id: str, storage: StorageRepository = Depends(get_storage)):
    note = await storage.get_note(note_id)
    if note is None:
        raise NotFoundError(resource="Note", resource_id=note_id)
    return note


@router.post(
    "",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a note from typed text",
)
async def create_note(data: NoteCreate, storage: StorageRepository = Depends(get_storage)):
    return await storage.create_note(data)


@router.post(
    "/upload",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing fields, unsupported or oversized file", "model": ErrorResponse},
        500: {"description": "Text extraction or storage failed", "model": ErrorResponse},
    },
    summary="Upload a note file (text, PDF or image)",
    description=(
        "Multipart form with `title`, `subjectId` and either a `file` or `content`. "
        "PDFs and images are read by the AI provider; text files are decoded as UTF-8."
    ),
)
async def upload_note(
    title: str = Form(default=""),
    subject_id: str = Form(default="", alias="subjectId"),
    content: Optional[str] = Form(default=None),
    file_type: Optional[str] = Form(default=None, alias="fileType"),
    file: Optional[UploadFile] = File(default=None),
    storage: StorageRepository = Depends(get_storage),
    ai_gateway: AIGateway = Depends(get_ai_gateway),
):
    filename = None
    file_content = None
    if file is not None and file.filename:
        # Reject oversized uploads before reading them into memory
        note_service.files.validate_declared_size(file.size)
        filename = file.filename
        file_content = await file.read()
        logger.info("Received upload: %s (%d bytes)", filename, len(file_content))

    return await note_service.upload_note(
        storage,
        ai_gateway,
        title=title,
        subject_id=subject_id,
        content=content,
        file_type=file_type,
        filename=filename,
        file_content=file_content,
        content_length=file.size if file is not None else None,
    )


@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
    summary="Delete a note",
)
async def delete_note(note_id: str, storage: StorageRepository = Depends(get_storage)):
    if not await storage.delete_note(note_id):
        raise NotFoundError(resource="Note", resource_id=note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
