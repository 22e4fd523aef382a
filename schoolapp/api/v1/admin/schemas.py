from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from schoolapp.core.enums import UserRole


class _UserCreateBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone_number: Optional[str] = Field(None, max_length=20)
    role: UserRole = Field(..., description="Must match the endpoint's role")


class PrincipalCreate(_UserCreateBase):
    school_id: int


class TeacherCreate(_UserCreateBase):
    subjects: List[str] = Field(default_factory=list, description="Subject names the teacher can teach")


class StudentCreate(_UserCreateBase):
    class_id: int


class ParentCreate(_UserCreateBase):
    pass


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    role: UserRole
    school_id: Optional[int] = None
    enabled: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TeacherResponse(BaseModel):
    id: int  # teacher_profiles.id
    user: UserResponse
    subjects: List[str] = Field(default_factory=list)
