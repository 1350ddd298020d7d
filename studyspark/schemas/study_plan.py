"""
Study plan request/response schemas.

StudyTask is an embedded value inside StudyPlanResponse.tasks; it has an id
(for PATCH /api/study-plans/{planId}/tasks/{taskId}) but no table of its own.
Dates are ISO `YYYY-MM-DD` strings so that plain string comparison orders
them chronologically.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from studyspark.schemas.base import CamelModel

Priority = Literal["high", "medium", "low"]


class StudyTaskCreate(CamelModel):
    topic: str
    subject: str
    duration: str
    priority: Priority = "medium"
    completed: bool = False
    date: str
    time_slot: Optional[str] = None


class StudyTask(StudyTaskCreate):
    id: str


class StudyTaskUpdate(CamelModel):
    """Body of the task PATCH; usually just {"completed": true}."""
    topic: Optional[str] = None
    subject: Optional[str] = None
    duration: Optional[str] = None
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    date: Optional[str] = None
    time_slot: Optional[str] = None


class StudyPlanCreate(CamelModel):
    title: str
    description: str
    start_date: str
    end_date: str
    tasks: List[StudyTaskCreate] = Field(default_factory=list)


class StudyPlanResponse(CamelModel):
    id: str
    title: str
    description: str
    start_date: str
    end_date: str
    tasks: List[StudyTask] = Field(default_factory=list)
    created_at: datetime
