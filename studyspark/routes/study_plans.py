"""
StudySpark Backend — Study Plan Route Handlers
================================================

Plans are created by POST /api/ai/study-plan. The planner page ticks tasks
off through the task PATCH, which returns the whole updated plan.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from studyspark.dependencies import get_storage
from studyspark.exceptions import NotFoundError
from studyspark.schemas.base import ErrorResponse
from studyspark.schemas.study_plan import StudyPlanResponse, StudyTaskUpdate
from studyspark.storage.base import StorageRepository

router = APIRouter(prefix="/api/study-plans", tags=["Study Plans"])

NOT_FOUND = {404: {"description": "Study plan or task not found", "model": ErrorResponse}}


@router.get("", response_model=List[StudyPlanResponse], summary="List study plans, newest first")
async def list_study_plans(storage: StorageRepository = Depends(get_storage)):
    return await storage.get_study_plans()


@router.get("/{plan_id}", response_model=StudyPlanResponse, responses=NOT_FOUND)
async def get_study_plan(plan_id: str, storage: StorageRepository = Depends(get_storage)):
    plan = await storage.get_study_plan(plan_id)
    if plan is None:
        raise NotFoundError(resource="Study plan", resource_id=plan_id)
    return plan


@router.patch(
    "/{plan_id}/tasks/{task_id}",
    response_model=StudyPlanResponse,
    responses=NOT_FOUND,
    summary="Update one task (usually its completed flag)",
)
async def update_study_plan_task(
    plan_id: str,
    task_id: str,
    data: StudyTaskUpdate,
    storage: StorageRepository = Depends(get_storage),
):
    plan = await storage.update_study_plan_task(plan_id, task_id, data)
    if plan is None:
        raise NotFoundError(
            resource="Study plan task",
            context={"plan_id": plan_id, "task_id": task_id},
        )
    return plan


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_study_plan(plan_id: str, storage: StorageRepository = Depends(get_storage)):
    if not await storage.delete_study_plan(plan_id):
        raise NotFoundError(resource="Study plan", resource_id=plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
