from typing import Optional

from pydantic import BaseModel, EmailStr

from schoolapp.core.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserInfo(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: UserRole
    school_id: Optional[int] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class CurrentUserResponse(UserInfo):
    """Authenticated user with resolved profile ids."""

    teacher_profile_id: Optional[int] = None
    student_profile_id: Optional[int] = None
