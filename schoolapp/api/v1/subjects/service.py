"""Subject catalog. Shared by every school; writes need a super admin or a school-bound principal, reads are open."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.access.policy import Operation, require_role
from schoolapp.core.exceptions import NotFoundError
from schoolapp.core.models import Subject
from schoolapp.core.services import commit_or_conflict, get_or_404

from .schemas import SubjectCreate, SubjectResponse, SubjectUpdate


async def create_subject(db: AsyncSession, caller: Caller, payload: SubjectCreate) -> SubjectResponse:
    require_role(Operation.MANAGE_SUBJECT, caller)
    subject = Subject(
        name=payload.name,
        subject_code=payload.subject_code,
        description=payload.description,
    )
    db.add(subject)
    await commit_or_conflict(db, "Subject code already exists")
    await db.refresh(subject)
    return SubjectResponse.model_validate(subject)


async def get_subject(db: AsyncSession, subject_id: int) -> SubjectResponse:
    return SubjectResponse.model_validate(await get_or_404(db, Subject, subject_id, "Subject"))


async def get_subject_by_code(db: AsyncSession, subject_code: str) -> SubjectResponse:
    result = await db.execute(select(Subject).where(Subject.subject_code == subject_code))
    subject = result.scalar_one_or_none()
    if subject is None:
        raise NotFoundError("Subject not found")
    return SubjectResponse.model_validate(subject)


async def list_subjects(db: AsyncSession) -> List[SubjectResponse]:
    result = await db.execute(select(Subject).order_by(Subject.name))
    return [SubjectResponse.model_validate(s) for s in result.scalars().all()]


async def update_subject(db: AsyncSession, caller: Caller, subject_id: int, payload: SubjectUpdate) -> SubjectResponse:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    require_role(Operation.MANAGE_SUBJECT, caller)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(subject, field, value)
    await commit_or_conflict(db, "Subject code already exists")
    await db.refresh(subject)
    return SubjectResponse.model_validate(subject)


async def delete_subject(db: AsyncSession, caller: Caller, subject_id: int) -> None:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    require_role(Operation.MANAGE_SUBJECT, caller)
    await db.delete(subject)
    await db.commit()
