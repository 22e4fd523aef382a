import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import (
    resolve_assignment_chain,
    resolve_mark_chain,
    resolve_student_assignment_chain,
    resolve_student_chain,
)
from schoolapp.access.identity import Caller, TeacherCaller
from schoolapp.access.policy import Operation, enforce
from schoolapp.core.exceptions import NotFoundError
from schoolapp.core.models import Mark, StudentProfile, SubjectAssignment
from schoolapp.core.services import get_or_404

from .schemas import MarkRequest, MarkResponse

logger = logging.getLogger(__name__)


def _apply(mark: Mark, payload: MarkRequest, caller: Caller) -> None:
    mark.assessment_name = payload.assessment_name
    mark.marks_obtained = payload.marks_obtained
    mark.total_marks = payload.total_marks
    mark.grade = payload.grade
    mark.exam_date = payload.exam_date
    mark.comments = payload.comments
    # Last teacher to touch the mark becomes its recorder; admins leave it as is.
    if isinstance(caller, TeacherCaller):
        mark.recorded_by_teacher_id = caller.teacher_profile_id


async def enter_mark(db: AsyncSession, caller: Caller, payload: MarkRequest) -> MarkResponse:
    student = await get_or_404(db, StudentProfile, payload.student_id, "Student")
    assignment = await get_or_404(db, SubjectAssignment, payload.subject_assignment_id, "Subject assignment")
    enforce(Operation.ENTER_MARK, caller, await resolve_student_assignment_chain(db, student, assignment))
    guard.ensure_student_in_class(student, assignment)
    mark = Mark(student_id=student.id, subject_assignment_id=assignment.id)
    _apply(mark, payload, caller)
    db.add(mark)
    await db.commit()
    await db.refresh(mark)
    logger.info("Mark %s entered for student %s on assignment %s", mark.id, student.id, assignment.id)
    return MarkResponse.model_validate(mark)


async def update_mark(db: AsyncSession, caller: Caller, mark_id: int, payload: MarkRequest) -> MarkResponse:
    mark = await get_or_404(db, Mark, mark_id, "Mark")
    enforce(Operation.UPDATE_MARK, caller, await resolve_mark_chain(db, mark))
    guard.ensure_same_mark_target(mark, payload.student_id, payload.subject_assignment_id)
    _apply(mark, payload, caller)
    await db.commit()
    await db.refresh(mark)
    logger.info("Mark %s updated by user %s", mark.id, caller.user_id)
    return MarkResponse.model_validate(mark)


async def get_mark(db: AsyncSession, caller: Caller, mark_id: int) -> MarkResponse:
    mark = await get_or_404(db, Mark, mark_id, "Mark")
    enforce(Operation.VIEW_MARK, caller, await resolve_mark_chain(db, mark))
    return MarkResponse.model_validate(mark)


async def _marks_for_student(db: AsyncSession, caller: Caller, student: StudentProfile) -> List[MarkResponse]:
    enforce(Operation.VIEW_MARK, caller, await resolve_student_chain(db, student))
    result = await db.execute(
        select(Mark).where(Mark.student_id == student.id).order_by(Mark.exam_date, Mark.id)
    )
    return [MarkResponse.model_validate(m) for m in result.scalars().all()]


async def list_by_student(db: AsyncSession, caller: Caller, student_id: int) -> List[MarkResponse]:
    student = await get_or_404(db, StudentProfile, student_id, "Student")
    return await _marks_for_student(db, caller, student)


async def list_by_student_user(db: AsyncSession, caller: Caller, user_id: int) -> List[MarkResponse]:
    result = await db.execute(select(StudentProfile).where(StudentProfile.user_id == user_id))
    student = result.scalar_one_or_none()
    if student is None:
        raise NotFoundError("Student not found")
    return await _marks_for_student(db, caller, student)


async def list_by_assignment(db: AsyncSession, caller: Caller, assignment_id: int) -> List[MarkResponse]:
    assignment = await get_or_404(db, SubjectAssignment, assignment_id, "Subject assignment")
    enforce(Operation.VIEW_MARK, caller, await resolve_assignment_chain(db, assignment))
    result = await db.execute(
        select(Mark).where(Mark.subject_assignment_id == assignment_id).order_by(Mark.student_id, Mark.id)
    )
    return [MarkResponse.model_validate(m) for m in result.scalars().all()]


async def delete_mark(db: AsyncSession, caller: Caller, mark_id: int) -> None:
    mark = await get_or_404(db, Mark, mark_id, "Mark")
    enforce(Operation.DELETE_MARK, caller, await resolve_mark_chain(db, mark))
    await db.delete(mark)
    await db.commit()
    logger.info("Mark %s deleted by user %s", mark_id, caller.user_id)
