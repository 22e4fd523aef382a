import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import school_chain
from schoolapp.access.identity import Caller, SuperAdminCaller
from schoolapp.access.policy import Operation, enforce
from schoolapp.core.models import School
from schoolapp.core.services import commit_or_conflict, get_or_404

from .schemas import SchoolCreate, SchoolResponse, SchoolUpdate

logger = logging.getLogger(__name__)


async def create_school(db: AsyncSession, caller: Caller, payload: SchoolCreate) -> SchoolResponse:
    enforce(Operation.MANAGE_SCHOOL, caller, school_chain(None))
    school = School(
        name=payload.name,
        address=payload.address,
        phone_number=payload.phone_number,
        email=payload.email,
    )
    db.add(school)
    await db.commit()
    await db.refresh(school)
    logger.info("School %s created by user %s", school.id, caller.user_id)
    return SchoolResponse.model_validate(school)


async def get_school(db: AsyncSession, caller: Caller, school_id: int) -> SchoolResponse:
    school = await get_or_404(db, School, school_id, "School")
    enforce(Operation.VIEW_SCHOOL, caller, school_chain(school.id))
    return SchoolResponse.model_validate(school)


async def list_schools(db: AsyncSession, caller: Caller) -> List[SchoolResponse]:
    """Super admin: every school. Principal: own school only."""
    stmt = select(School).order_by(School.name)
    if not isinstance(caller, SuperAdminCaller):
        enforce(Operation.VIEW_SCHOOL, caller, school_chain(caller.school_id))
        stmt = stmt.where(School.id == caller.school_id)
    result = await db.execute(stmt)
    return [SchoolResponse.model_validate(s) for s in result.scalars().all()]


async def update_school(db: AsyncSession, caller: Caller, school_id: int, payload: SchoolUpdate) -> SchoolResponse:
    school = await get_or_404(db, School, school_id, "School")
    enforce(Operation.MANAGE_SCHOOL, caller, school_chain(school.id))
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(school, field, value)
    await db.commit()
    await db.refresh(school)
    logger.info("School %s updated by user %s", school.id, caller.user_id)
    return SchoolResponse.model_validate(school)


async def delete_school(db: AsyncSession, caller: Caller, school_id: int) -> None:
    school = await get_or_404(db, School, school_id, "School")
    enforce(Operation.MANAGE_SCHOOL, caller, school_chain(school.id))
    await guard.ensure_school_empty(db, school.id)
    await db.delete(school)
    await commit_or_conflict(db, "School is still referenced by other records")
    logger.info("School %s deleted by user %s", school_id, caller.user_id)
