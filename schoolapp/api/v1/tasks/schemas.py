from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from schoolapp.core.enums import TaskPriority, TaskStatus, TaskType


def _must_be_future(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return value
    if value.tzinfo is None:
        # Naive input is taken as UTC.
        value = value.replace(tzinfo=timezone.utc)
    if value <= datetime.now(timezone.utc):
        raise ValueError("due_date must be in the future")
    return value


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: datetime
    status: TaskStatus = TaskStatus.PENDING
    priority: Optional[TaskPriority] = None
    task_type: TaskType
    student_id: Optional[int] = Field(None, description="student_profiles.id")
    class_id: Optional[int] = None
    subject_assignment_id: Optional[int] = None
    # Only admins name the assigner; a teacher always assigns as themselves.
    teacher_id: Optional[int] = Field(None, description="teacher_profiles.id")

    @field_validator("due_date")
    @classmethod
    def due_date_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _must_be_future(value)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    task_type: Optional[TaskType] = None

    @field_validator("due_date")
    @classmethod
    def due_date_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _must_be_future(value)


class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    due_date: datetime
    status: TaskStatus
    priority: Optional[TaskPriority] = None
    task_type: Optional[TaskType] = None
    teacher_id: int
    student_id: Optional[int] = None
    class_id: Optional[int] = None
    subject_assignment_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
