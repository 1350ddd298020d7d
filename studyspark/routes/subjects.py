"""
StudySpark Backend — Subject Route Handlers
=============================================

Subjects own notes, summaries, flashcards and questions; deleting one
removes all of them.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from studyspark.dependencies import get_storage
from studyspark.exceptions import NotFoundError
from studyspark.schemas.base import ErrorResponse
from studyspark.schemas.subject import SubjectCreate, SubjectResponse, SubjectUpdate
from studyspark.storage.base import StorageRepository

router = APIRouter(prefix="/api/subjects", tags=["Subjects"])

NOT_FOUND = {404: {"description": "Subject not found", "model": ErrorResponse}}


@router.get("", response_model=List[SubjectResponse], summary="List subjects")
async def list_subjects(storage: StorageRepository = Depends(get_storage)):
    return await storage.get_subjects()


@router.get(
    "/{subject_id}",
    response_model=SubjectResponse,
    responses=NOT_FOUND,
    summary="Get a subject with its counters",
)
async def get_subject(subject_id: str, storage: StorageRepository = Depends(get_storage)):
    subject = await storage.get_subject(subject_id)
    if subject is None:
        raise NotFoundError(resource="Subject", resource_id=subject_id)
    return subject


@router.post(
    "",
    response_model=SubjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a subject",
)
async def create_subject(data: SubjectCreate, storage: StorageRepository = Depends(get_storage)):
    return await storage.create_subject(data)


@router.patch(
    "/{subject_id}",
    response_model=SubjectResponse,
    responses=NOT_FOUND,
    summary="Rename or restyle a subject",
)
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    storage: StorageRepository = Depends(get_storage),
):
    subject = await storage.update_subject(subject_id, data)
    if subject is None:
        raise NotFoundError(resource="Subject", resource_id=subject_id)
    return subject


@router.delete(
    "/{subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
    summary="Delete a subject and everything it owns",
)
async def delete_subject(subject_id: str, storage: StorageRepository = Depends(get_storage)):
    if not await storage.delete_subject(subject_id):
        raise NotFoundError(resource="Subject", resource_id=subject_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
