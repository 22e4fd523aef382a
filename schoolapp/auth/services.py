import logging
from typing import Optional

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller, StudentCaller, TeacherCaller
from schoolapp.auth.models import User
from schoolapp.auth.schemas import CurrentUserResponse, LoginRequest, LoginResponse, UserInfo
from schoolapp.auth.security import create_access_token, verify_password
from schoolapp.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


def _user_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        name=user.full_name,
        email=user.email,
        role=user.role,
        school_id=user.school_id,
    )


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    # 1. Find user by email (case-insensitive)
    result = await db.execute(select(User).where(func.lower(User.email) == func.lower(payload.email)))
    user: Optional[User] = result.scalar_one_or_none()
    if not user:
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 2. Verify password hash
    if not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for user %s", user.id)
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # 3. Disabled accounts cannot log in
    if not user.enabled:
        raise ServiceError("User is disabled", status.HTTP_403_FORBIDDEN)

    access_token = create_access_token(
        subject={"sub": user.email, "user_id": user.id, "role": user.role},
    )
    logger.info("User %s logged in", user.id)
    return LoginResponse(access_token=access_token, user=_user_info(user))


async def get_current_user_info(db: AsyncSession, caller: Caller) -> CurrentUserResponse:
    user = await db.get(User, caller.user_id)
    return CurrentUserResponse(
        **_user_info(user).model_dump(),
        teacher_profile_id=caller.teacher_profile_id if isinstance(caller, TeacherCaller) else None,
        student_profile_id=caller.student_profile_id if isinstance(caller, StudentCaller) else None,
    )
