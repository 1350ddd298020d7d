"""Summary route handlers. Summaries are created by POST /api/ai/summarize."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from studyspark.dependencies import get_storage
from studyspark.exceptions import NotFoundError
from studyspark.schemas.base import ErrorResponse
from studyspark.schemas.summary import SummaryResponse
from studyspark.storage.base import StorageRepository

router = APIRouter(prefix="/api/summaries", tags=["Summaries"])

NOT_FOUND = {404: {"description": "Summary not found", "model": ErrorResponse}}


@router.get("", response_model=List[SummaryResponse], summary="List summaries, newest first")
async def list_summaries(
    subject_id: Optional[str] = Query(default=None, alias="subjectId"),
    storage: StorageRepository = Depends(get_storage),
):
    return await storage.get_summaries(subject_id)


@router.get("/{summary_id}", response_model=SummaryResponse, responses=NOT_FOUND)
async def get_summary(summary_id: str, storage: StorageRepository = Depends(get_storage)):
    summary = await storage.get_summary(summary_id)
    if summary is None:
        raise NotFoundError(resource="Summary", resource_id=summary_id)
    return summary


@router.delete("/{summary_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_summary(summary_id: str, storage: StorageRepository = Depends(get_storage)):
    if not await storage.delete_summary(summary_id):
        raise NotFoundError(resource="Summary", resource_id=summary_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
