"""Pydantic schemas for task request/response validation."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field

from app.schemas.common import CamelModel

Priority = Literal["DO_FIRST", "SCHEDULE", "DELEGATE", "ELIMINATE"]
Status = Literal["TODO", "IN_PROGRESS", "REVIEW", "TESTING", "DONE"]

TASK_STATUSES = ("TODO", "IN_PROGRESS", "REVIEW", "TESTING", "DONE")


class TaskCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    project_id: Optional[int] = None
    priority: Optional[Priority] = None
    status: Status = "TODO"
    progress: int = Field(default=0, ge=0, le=100)
    start_date: Optional[date] = None
    start_time: Optional[str] = None
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    is_recurring: bool = False


class TaskUpdate(CamelModel):
    """Schema for updating an existing task."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    project_id: Optional[int] = None
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    completed: Optional[bool] = None
    start_date: Optional[date] = None
    start_time: Optional[str] = None
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    is_recurring: Optional[bool] = None


class TaskResponse(CamelModel):
    """Schema for task responses from API."""

    id: int
    user_id: int
    project_id: Optional[int]
    title: str
    description: Optional[str]
    priority: Optional[str]
    status: str
    progress: int
    completed: bool
    completed_at: Optional[datetime]
    start_date: Optional[date]
    start_time: Optional[str]
    due_date: Optional[date]
    due_time: Optional[str]
    is_recurring: bool
    assigned_to_bot_id: Optional[int]
    created_at: datetime
    updated_at: datetime
