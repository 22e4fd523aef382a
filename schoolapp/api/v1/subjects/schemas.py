from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    subject_code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    subject_code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None


class SubjectResponse(BaseModel):
    id: int
    name: str
    subject_code: str
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
