import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import (
    resolve_assignment_chain,
    resolve_class_chain,
    resolve_teacher_chain,
    teacher_school_id,
)
from schoolapp.access.identity import Caller, SuperAdminCaller
from schoolapp.access.policy import Operation, enforce, require_role
from schoolapp.core.enums import AssignmentStatus
from schoolapp.core.models import SchoolClass, Subject, SubjectAssignment, TeacherProfile
from schoolapp.core.services import commit_or_conflict, get_or_404

from .schemas import SubjectAssignmentCreate, SubjectAssignmentResponse, SubjectAssignmentUpdate

logger = logging.getLogger(__name__)

DUPLICATE_ASSIGNMENT = "This subject assignment already exists"


async def _ensure_teacher_in_class_school(db: AsyncSession, teacher_id: int, school_class: SchoolClass) -> None:
    guard.ensure_same_school(await teacher_school_id(db, teacher_id), school_class.school_id, "Teacher")


async def create_assignment(
    db: AsyncSession,
    caller: Caller,
    payload: SubjectAssignmentCreate,
) -> SubjectAssignmentResponse:
    school_class = await get_or_404(db, SchoolClass, payload.class_id, "Class")
    await get_or_404(db, Subject, payload.subject_id, "Subject")
    await get_or_404(db, TeacherProfile, payload.teacher_id, "Teacher")
    enforce(Operation.CREATE_SUBJECT_ASSIGNMENT, caller, await resolve_class_chain(db, school_class))
    await _ensure_teacher_in_class_school(db, payload.teacher_id, school_class)
    await guard.ensure_assignment_unique(
        db,
        class_id=payload.class_id,
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
        academic_year=payload.academic_year,
        term=payload.term,
    )
    assignment = SubjectAssignment(
        class_id=payload.class_id,
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
        academic_year=payload.academic_year,
        term=payload.term,
        status=(payload.status or AssignmentStatus.ACTIVE).value,
    )
    db.add(assignment)
    await commit_or_conflict(db, DUPLICATE_ASSIGNMENT)
    await db.refresh(assignment)
    logger.info(
        "Subject assignment %s created: class %s, subject %s, teacher %s",
        assignment.id, assignment.class_id, assignment.subject_id, assignment.teacher_id,
    )
    return SubjectAssignmentResponse.model_validate(assignment)


async def get_assignment(db: AsyncSession, caller: Caller, assignment_id: int) -> SubjectAssignmentResponse:
    assignment = await get_or_404(db, SubjectAssignment, assignment_id, "Subject assignment")
    enforce(Operation.VIEW_SUBJECT_ASSIGNMENT, caller, await resolve_assignment_chain(db, assignment))
    return SubjectAssignmentResponse.model_validate(assignment)


async def list_by_class(db: AsyncSession, caller: Caller, class_id: int) -> List[SubjectAssignmentResponse]:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    enforce(Operation.VIEW_SUBJECT_ASSIGNMENT, caller, await resolve_class_chain(db, school_class))
    result = await db.execute(
        select(SubjectAssignment).where(SubjectAssignment.class_id == class_id).order_by(SubjectAssignment.id)
    )
    return [SubjectAssignmentResponse.model_validate(a) for a in result.scalars().all()]


async def list_by_teacher(db: AsyncSession, caller: Caller, teacher_id: int) -> List[SubjectAssignmentResponse]:
    teacher = await get_or_404(db, TeacherProfile, teacher_id, "Teacher")
    enforce(Operation.VIEW_SUBJECT_ASSIGNMENT, caller, await resolve_teacher_chain(db, teacher))
    result = await db.execute(
        select(SubjectAssignment).where(SubjectAssignment.teacher_id == teacher_id).order_by(SubjectAssignment.id)
    )
    return [SubjectAssignmentResponse.model_validate(a) for a in result.scalars().all()]


async def list_by_subject(db: AsyncSession, caller: Caller, subject_id: int) -> List[SubjectAssignmentResponse]:
    """Subjects are shared; results are limited to the caller's school unless super admin."""
    await get_or_404(db, Subject, subject_id, "Subject")
    stmt = select(SubjectAssignment).where(SubjectAssignment.subject_id == subject_id)
    if not isinstance(caller, SuperAdminCaller):
        require_role(Operation.VIEW_SUBJECT_ASSIGNMENT, caller)
        stmt = stmt.join(SchoolClass, SchoolClass.id == SubjectAssignment.class_id).where(
            SchoolClass.school_id == caller.school_id
        )
    result = await db.execute(stmt.order_by(SubjectAssignment.id))
    return [SubjectAssignmentResponse.model_validate(a) for a in result.scalars().all()]


async def update_assignment(
    db: AsyncSession,
    caller: Caller,
    assignment_id: int,
    payload: SubjectAssignmentUpdate,
) -> SubjectAssignmentResponse:
    assignment = await get_or_404(db, SubjectAssignment, assignment_id, "Subject assignment")
    if payload.teacher_id is not None:
        await get_or_404(db, TeacherProfile, payload.teacher_id, "Teacher")
    enforce(Operation.UPDATE_SUBJECT_ASSIGNMENT, caller, await resolve_assignment_chain(db, assignment))
    school_class = await db.get(SchoolClass, assignment.class_id)
    if payload.teacher_id is not None and payload.teacher_id != assignment.teacher_id:
        await _ensure_teacher_in_class_school(db, payload.teacher_id, school_class)
    teacher_id = payload.teacher_id if payload.teacher_id is not None else assignment.teacher_id
    academic_year = payload.academic_year if payload.academic_year is not None else assignment.academic_year
    term = payload.term if payload.term is not None else assignment.term
    await guard.ensure_assignment_unique(
        db,
        class_id=assignment.class_id,
        subject_id=assignment.subject_id,
        teacher_id=teacher_id,
        academic_year=academic_year,
        term=term,
        exclude_id=assignment.id,
    )
    assignment.teacher_id = teacher_id
    assignment.academic_year = academic_year
    assignment.term = term
    if payload.status is not None:
        assignment.status = payload.status.value
    await commit_or_conflict(db, DUPLICATE_ASSIGNMENT)
    await db.refresh(assignment)
    logger.info("Subject assignment %s updated by user %s", assignment.id, caller.user_id)
    return SubjectAssignmentResponse.model_validate(assignment)


async def delete_assignment(db: AsyncSession, caller: Caller, assignment_id: int) -> None:
    assignment = await get_or_404(db, SubjectAssignment, assignment_id, "Subject assignment")
    enforce(Operation.DELETE_SUBJECT_ASSIGNMENT, caller, await resolve_assignment_chain(db, assignment))
    await db.delete(assignment)
    await db.commit()
    logger.info("Subject assignment %s deleted by user %s", assignment_id, caller.user_id)
