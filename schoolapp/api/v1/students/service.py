import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import resolve_class_chain, resolve_student_chain
from schoolapp.access.identity import Caller
from schoolapp.access.policy import Operation, enforce
from schoolapp.auth.models import User
from schoolapp.core.exceptions import NotFoundError
from schoolapp.core.models import SchoolClass, StudentProfile
from schoolapp.core.services import get_or_404

from .schemas import StudentResponse

logger = logging.getLogger(__name__)


def to_student_response(profile: StudentProfile, user: User) -> StudentResponse:
    return StudentResponse(
        id=profile.id,
        user_id=user.id,
        class_id=profile.class_id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
    )


async def get_student(db: AsyncSession, caller: Caller, student_id: int) -> StudentResponse:
    profile = await get_or_404(db, StudentProfile, student_id, "Student")
    enforce(Operation.VIEW_STUDENT, caller, await resolve_student_chain(db, profile))
    return to_student_response(profile, await db.get(User, profile.user_id))


async def get_student_by_user_id(db: AsyncSession, caller: Caller, user_id: int) -> StudentResponse:
    result = await db.execute(select(StudentProfile).where(StudentProfile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("Student not found")
    enforce(Operation.VIEW_STUDENT, caller, await resolve_student_chain(db, profile))
    return to_student_response(profile, await db.get(User, profile.user_id))


async def list_students_by_class(db: AsyncSession, caller: Caller, class_id: int) -> List[StudentResponse]:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    enforce(Operation.VIEW_STUDENT, caller, await resolve_class_chain(db, school_class))
    result = await db.execute(
        select(StudentProfile, User)
        .join(User, User.id == StudentProfile.user_id)
        .where(StudentProfile.class_id == class_id)
        .order_by(User.last_name, User.first_name)
    )
    return [to_student_response(profile, user) for profile, user in result.all()]


async def reassign_class(db: AsyncSession, caller: Caller, student_id: int, class_id: int) -> StudentResponse:
    profile = await get_or_404(db, StudentProfile, student_id, "Student")
    target = await get_or_404(db, SchoolClass, class_id, "Class")
    chain = await resolve_student_chain(db, profile)
    enforce(Operation.MANAGE_STUDENT, caller, chain)
    guard.ensure_same_school(target.school_id, chain.school_id, "Class")
    previous_class_id = profile.class_id
    profile.class_id = target.id
    await db.commit()
    await db.refresh(profile)
    logger.info("Student %s moved from class %s to class %s", profile.id, previous_class_id, target.id)
    return to_student_response(profile, await db.get(User, profile.user_id))


async def delete_student(db: AsyncSession, caller: Caller, student_id: int) -> None:
    profile = await get_or_404(db, StudentProfile, student_id, "Student")
    enforce(Operation.MANAGE_STUDENT, caller, await resolve_student_chain(db, profile))
    user = await db.get(User, profile.user_id)
    await db.delete(profile)
    if user is not None:
        await db.delete(user)
    await db.commit()
    logger.info("Student %s deleted by user %s", student_id, caller.user_id)
