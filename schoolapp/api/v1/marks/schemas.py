from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class MarkRequest(BaseModel):
    """Body for both entering and updating a mark."""

    student_id: int = Field(..., description="student_profiles.id")
    subject_assignment_id: int
    assessment_name: str = Field(..., min_length=1, max_length=255)
    marks_obtained: Decimal = Field(..., ge=0, max_digits=5, decimal_places=2)
    total_marks: Decimal = Field(..., gt=0, max_digits=5, decimal_places=2)
    grade: Optional[str] = Field(None, max_length=10)
    exam_date: Optional[date] = None
    comments: Optional[str] = None

    @model_validator(mode="after")
    def obtained_within_total(self):
        if self.marks_obtained > self.total_marks:
            raise ValueError("marks_obtained cannot exceed total_marks")
        return self


class MarkResponse(BaseModel):
    id: int
    student_id: int
    subject_assignment_id: int
    assessment_name: str
    marks_obtained: Decimal
    total_marks: Decimal
    grade: Optional[str] = None
    exam_date: Optional[date] = None
    comments: Optional[str] = None
    recorded_by_teacher_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
