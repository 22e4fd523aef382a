"""User provisioning. Super admin creates principals; principals create everyone else in their school."""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import school_chain
from schoolapp.access.identity import Caller
from schoolapp.access.policy import Operation, enforce
from schoolapp.api.v1.students.schemas import StudentResponse
from schoolapp.api.v1.students.service import to_student_response
from schoolapp.auth.models import User
from schoolapp.auth.security import hash_password
from schoolapp.core.enums import UserRole
from schoolapp.core.models import School, SchoolClass, StudentProfile, TeacherProfile, TeacherSubject
from schoolapp.core.services import commit_or_conflict, get_or_404

from .schemas import (
    ParentCreate,
    PrincipalCreate,
    StudentCreate,
    TeacherCreate,
    TeacherResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "Email is already registered"


def _new_user(payload, role: UserRole, school_id: int) -> User:
    return User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone_number=payload.phone_number,
        role=role.value,
        school_id=school_id,
        enabled=True,
    )


async def create_principal(db: AsyncSession, caller: Caller, payload: PrincipalCreate) -> UserResponse:
    school = await get_or_404(db, School, payload.school_id, "School")
    enforce(Operation.CREATE_PRINCIPAL, caller, school_chain(school.id))
    guard.ensure_role(payload.role, UserRole.ADMIN)
    await guard.ensure_email_available(db, payload.email)
    user = _new_user(payload, UserRole.ADMIN, school.id)
    db.add(user)
    await db.flush()
    school.principal_id = user.id
    await commit_or_conflict(db, DUPLICATE_EMAIL)
    await db.refresh(user)
    logger.info("Principal %s created for school %s", user.id, school.id)
    return UserResponse.model_validate(user)


async def create_teacher(db: AsyncSession, caller: Caller, payload: TeacherCreate) -> TeacherResponse:
    enforce(Operation.CREATE_SCHOOL_MEMBER, caller, school_chain(caller.school_id))
    guard.ensure_role(payload.role, UserRole.TEACHER)
    await guard.ensure_email_available(db, payload.email)
    user = _new_user(payload, UserRole.TEACHER, caller.school_id)
    db.add(user)
    await db.flush()
    profile = TeacherProfile(user_id=user.id)
    db.add(profile)
    await db.flush()
    subjects: List[str] = sorted({s.strip() for s in payload.subjects if s.strip()})
    for name in subjects:
        db.add(TeacherSubject(teacher_id=profile.id, subject=name))
    await commit_or_conflict(db, DUPLICATE_EMAIL)
    await db.refresh(user)
    logger.info("Teacher %s (profile %s) created in school %s", user.id, profile.id, caller.school_id)
    return TeacherResponse(id=profile.id, user=UserResponse.model_validate(user), subjects=subjects)


async def create_student(db: AsyncSession, caller: Caller, payload: StudentCreate) -> StudentResponse:
    school_class = await get_or_404(db, SchoolClass, payload.class_id, "Class")
    enforce(Operation.CREATE_SCHOOL_MEMBER, caller, school_chain(caller.school_id))
    guard.ensure_role(payload.role, UserRole.STUDENT)
    guard.ensure_class_in_school(school_class, caller.school_id)
    await guard.ensure_email_available(db, payload.email)
    user = _new_user(payload, UserRole.STUDENT, caller.school_id)
    db.add(user)
    await db.flush()
    profile = StudentProfile(user_id=user.id, class_id=school_class.id)
    db.add(profile)
    await commit_or_conflict(db, DUPLICATE_EMAIL)
    await db.refresh(profile)
    logger.info("Student %s (profile %s) created in class %s", user.id, profile.id, school_class.id)
    return to_student_response(profile, user)


async def create_parent(db: AsyncSession, caller: Caller, payload: ParentCreate) -> UserResponse:
    enforce(Operation.CREATE_SCHOOL_MEMBER, caller, school_chain(caller.school_id))
    guard.ensure_role(payload.role, UserRole.PARENT)
    await guard.ensure_email_available(db, payload.email)
    user = _new_user(payload, UserRole.PARENT, caller.school_id)
    db.add(user)
    await commit_or_conflict(db, DUPLICATE_EMAIL)
    await db.refresh(user)
    logger.info("Parent %s created in school %s", user.id, caller.school_id)
    return UserResponse.model_validate(user)
