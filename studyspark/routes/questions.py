"""Practice question route handlers. Questions are created by POST /api/ai/questions."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from studyspark.dependencies import get_storage
from studyspark.exceptions import NotFoundError
from studyspark.schemas.base import ErrorResponse
from studyspark.schemas.question import QuestionResponse
from studyspark.storage.base import StorageRepository

router = APIRouter(prefix="/api/questions", tags=["Questions"])

NOT_FOUND = {404: {"description": "Question not found", "model": ErrorResponse}}


@router.get("", response_model=List[QuestionResponse], summary="List practice questions")
async def list_questions(
    subject_id: Optional[str] = Query(
        default=None, alias="subjectId", description="Subject filter; 'all' disables it"
    ),
    storage: StorageRepository = Depends(get_storage),
):
    return await storage.get_questions(subject_id)


@router.get("/{question_id}", response_model=QuestionResponse, responses=NOT_FOUND)
async def get_question(question_id: str, storage: StorageRepository = Depends(get_storage)):
    question = await storage.get_question(question_id)
    if question is None:
        raise NotFoundError(resource="Question", resource_id=question_id)
    return question


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_question(question_id: str, storage: StorageRepository = Depends(get_storage)):
    if not await storage.delete_question(question_id):
        raise NotFoundError(resource="Question", resource_id=question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
