from datetime import datetime

from pydantic import BaseModel, Field


class FeedbackCreate(BaseModel):
    student_id: int = Field(..., description="student_profiles.id")
    subject_assignment_id: int
    feedback_text: str = Field(..., min_length=1)


class FeedbackResponse(BaseModel):
    id: int
    student_id: int
    subject_assignment_id: int
    feedback_text: str
    is_read: bool
    submission_date: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
