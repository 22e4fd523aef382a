"""Resolve the authenticated principal into a role-tagged caller.

Each caller variant only carries the data its role can act on: a principal its
school, a teacher its TeacherProfile id, a student its StudentProfile id.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.auth.models import User
from schoolapp.core.enums import UserRole
from schoolapp.core.exceptions import NotFoundError, ProfileMissingError
from schoolapp.core.models import StudentProfile, TeacherProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuperAdminCaller:
    role: ClassVar[UserRole] = UserRole.SUPER_ADMIN

    user_id: int
    email: str
    school_id: Optional[int] = None


@dataclass(frozen=True)
class PrincipalCaller:
    """School administrator (role ADMIN). school_id may be null on bad data; the policy denies such callers."""

    role: ClassVar[UserRole] = UserRole.ADMIN

    user_id: int
    email: str
    school_id: Optional[int]


@dataclass(frozen=True)
class TeacherCaller:
    role: ClassVar[UserRole] = UserRole.TEACHER

    user_id: int
    email: str
    school_id: Optional[int]
    teacher_profile_id: int


@dataclass(frozen=True)
class StudentCaller:
    role: ClassVar[UserRole] = UserRole.STUDENT

    user_id: int
    email: str
    school_id: Optional[int]
    student_profile_id: int


@dataclass(frozen=True)
class ParentCaller:
    role: ClassVar[UserRole] = UserRole.PARENT

    user_id: int
    email: str
    school_id: Optional[int]


Caller = Union[SuperAdminCaller, PrincipalCaller, TeacherCaller, StudentCaller, ParentCaller]


class IdentityContext:
    """Per-request identity state. Profiles are loaded at most once."""

    def __init__(self, db: AsyncSession, user: User) -> None:
        self.db = db
        self.user = user
        self._teacher_profile: Optional[TeacherProfile] = None
        self._student_profile: Optional[StudentProfile] = None
        self._caller: Optional[Caller] = None

    async def teacher_profile(self) -> TeacherProfile:
        if self._teacher_profile is None:
            result = await self.db.execute(
                select(TeacherProfile).where(TeacherProfile.user_id == self.user.id)
            )
            profile = result.scalar_one_or_none()
            if profile is None:
                logger.error("User %s has role TEACHER but no teacher profile", self.user.id)
                raise ProfileMissingError(UserRole.TEACHER.value, self.user.id)
            self._teacher_profile = profile
        return self._teacher_profile

    async def student_profile(self) -> StudentProfile:
        if self._student_profile is None:
            result = await self.db.execute(
                select(StudentProfile).where(StudentProfile.user_id == self.user.id)
            )
            profile = result.scalar_one_or_none()
            if profile is None:
                logger.error("User %s has role STUDENT but no student profile", self.user.id)
                raise ProfileMissingError(UserRole.STUDENT.value, self.user.id)
            self._student_profile = profile
        return self._student_profile

    async def caller(self) -> Caller:
        if self._caller is None:
            self._caller = await self._build_caller()
        return self._caller

    async def _build_caller(self) -> Caller:
        user = self.user
        role = UserRole(user.role)
        if role == UserRole.SUPER_ADMIN:
            return SuperAdminCaller(user_id=user.id, email=user.email)
        if role == UserRole.ADMIN:
            return PrincipalCaller(user_id=user.id, email=user.email, school_id=user.school_id)
        if role == UserRole.TEACHER:
            profile = await self.teacher_profile()
            return TeacherCaller(
                user_id=user.id,
                email=user.email,
                school_id=user.school_id,
                teacher_profile_id=profile.id,
            )
        if role == UserRole.STUDENT:
            profile = await self.student_profile()
            return StudentCaller(
                user_id=user.id,
                email=user.email,
                school_id=user.school_id,
                student_profile_id=profile.id,
            )
        return ParentCaller(user_id=user.id, email=user.email, school_id=user.school_id)


async def load_enabled_user(db: AsyncSession, principal_id: str) -> User:
    """Look up the user behind a principal identifier (email)."""
    result = await db.execute(select(User).where(User.email == principal_id))
    user = result.scalar_one_or_none()
    if user is None or not user.enabled:
        raise NotFoundError("User not found")
    return user


async def resolve_caller(db: AsyncSession, principal_id: str) -> Caller:
    user = await load_enabled_user(db, principal_id)
    return await IdentityContext(db, user).caller()
