from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from schoolapp.core.enums import AssignmentStatus


class SubjectAssignmentCreate(BaseModel):
    class_id: int
    subject_id: int
    teacher_id: int = Field(..., description="teacher_profiles.id")
    academic_year: str = Field(..., min_length=1, max_length=50)
    term: str = Field(..., min_length=1, max_length=50)
    status: Optional[AssignmentStatus] = None


class SubjectAssignmentUpdate(BaseModel):
    teacher_id: Optional[int] = Field(None, description="teacher_profiles.id")
    academic_year: Optional[str] = Field(None, min_length=1, max_length=50)
    term: Optional[str] = Field(None, min_length=1, max_length=50)
    status: Optional[AssignmentStatus] = None


class SubjectAssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus


class SubjectAssignmentResponse(BaseModel):
    id: int
    class_id: int
    subject_id: int
    teacher_id: int
    academic_year: str
    term: str
    status: AssignmentStatus
    created_at: datetime

    class Config:
        from_attributes = True
