from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    school_id: int
    class_teacher_id: Optional[int] = Field(None, description="users.id of a TEACHER in the same school")


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class AssignClassTeacherRequest(BaseModel):
    teacher_id: int = Field(..., description="users.id of the teacher")


class ClassResponse(BaseModel):
    id: int
    name: str
    school_id: int
    class_teacher_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
