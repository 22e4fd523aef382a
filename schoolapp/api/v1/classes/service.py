import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import resolve_class_chain, school_chain
from schoolapp.access.identity import Caller, SuperAdminCaller
from schoolapp.access.policy import Operation, enforce
from schoolapp.auth.models import User
from schoolapp.core.models import School, SchoolClass
from schoolapp.core.services import commit_or_conflict, get_or_404

from .schemas import ClassCreate, ClassResponse, ClassUpdate

logger = logging.getLogger(__name__)


async def create_class(db: AsyncSession, caller: Caller, payload: ClassCreate) -> ClassResponse:
    school = await get_or_404(db, School, payload.school_id, "School")
    teacher = None
    if payload.class_teacher_id is not None:
        teacher = await get_or_404(db, User, payload.class_teacher_id, "Teacher")
    enforce(Operation.MANAGE_CLASS, caller, school_chain(school.id))
    if teacher is not None:
        guard.ensure_teacher_user(teacher, school.id)
    school_class = SchoolClass(
        name=payload.name,
        school_id=school.id,
        class_teacher_id=payload.class_teacher_id,
    )
    db.add(school_class)
    await db.commit()
    await db.refresh(school_class)
    logger.info("Class %s created in school %s by user %s", school_class.id, school.id, caller.user_id)
    return ClassResponse.model_validate(school_class)


async def get_class(db: AsyncSession, caller: Caller, class_id: int) -> ClassResponse:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    enforce(Operation.VIEW_CLASS, caller, await resolve_class_chain(db, school_class))
    return ClassResponse.model_validate(school_class)


async def list_classes(
    db: AsyncSession,
    caller: Caller,
    school_id: Optional[int] = None,
) -> List[ClassResponse]:
    """Super admin: all (optionally one school). Others: their own school only."""
    stmt = select(SchoolClass).order_by(SchoolClass.school_id, SchoolClass.name)
    if isinstance(caller, SuperAdminCaller):
        if school_id is not None:
            stmt = stmt.where(SchoolClass.school_id == school_id)
    else:
        target_school_id = school_id if school_id is not None else caller.school_id
        enforce(Operation.VIEW_CLASS, caller, school_chain(target_school_id))
        stmt = stmt.where(SchoolClass.school_id == target_school_id)
    result = await db.execute(stmt)
    return [ClassResponse.model_validate(c) for c in result.scalars().all()]


async def update_class(db: AsyncSession, caller: Caller, class_id: int, payload: ClassUpdate) -> ClassResponse:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    enforce(Operation.MANAGE_CLASS, caller, await resolve_class_chain(db, school_class))
    if payload.name is not None:
        school_class.name = payload.name
    await db.commit()
    await db.refresh(school_class)
    return ClassResponse.model_validate(school_class)


async def assign_class_teacher(db: AsyncSession, caller: Caller, class_id: int, teacher_user_id: int) -> ClassResponse:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    teacher = await get_or_404(db, User, teacher_user_id, "Teacher")
    enforce(Operation.MANAGE_CLASS, caller, await resolve_class_chain(db, school_class))
    guard.ensure_teacher_user(teacher, school_class.school_id)
    school_class.class_teacher_id = teacher.id
    await db.commit()
    await db.refresh(school_class)
    logger.info("User %s is now class teacher of class %s", teacher.id, school_class.id)
    return ClassResponse.model_validate(school_class)


async def delete_class(db: AsyncSession, caller: Caller, class_id: int) -> None:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    enforce(Operation.MANAGE_CLASS, caller, await resolve_class_chain(db, school_class))
    await guard.ensure_class_empty(db, school_class.id)
    await db.delete(school_class)
    await commit_or_conflict(db, "Class is still referenced by other records")
    logger.info("Class %s deleted by user %s", class_id, caller.user_id)
