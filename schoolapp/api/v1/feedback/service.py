"""Feedback flows from a subject teacher about a student to that student's class-teacher."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import resolve_feedback_chain, resolve_student_assignment_chain, resolve_student_chain
from schoolapp.access.identity import Caller, TeacherCaller
from schoolapp.access.policy import Operation, authorize, enforce, require_role
from schoolapp.core.models import Feedback, SchoolClass, StudentProfile, SubjectAssignment
from schoolapp.core.services import get_or_404

from .schemas import FeedbackCreate, FeedbackResponse

logger = logging.getLogger(__name__)


async def submit_feedback(db: AsyncSession, caller: Caller, payload: FeedbackCreate) -> FeedbackResponse:
    student = await get_or_404(db, StudentProfile, payload.student_id, "Student")
    assignment = await get_or_404(db, SubjectAssignment, payload.subject_assignment_id, "Subject assignment")
    enforce(Operation.SUBMIT_FEEDBACK, caller, await resolve_student_assignment_chain(db, student, assignment))
    guard.ensure_student_in_class(student, assignment)
    feedback = Feedback(
        student_id=student.id,
        subject_assignment_id=assignment.id,
        feedback_text=payload.feedback_text,
        is_read=False,
    )
    db.add(feedback)
    await db.commit()
    await db.refresh(feedback)
    logger.info("Feedback %s submitted for student %s on assignment %s", feedback.id, student.id, assignment.id)
    return FeedbackResponse.model_validate(feedback)


async def get_feedback(db: AsyncSession, caller: Caller, feedback_id: int) -> FeedbackResponse:
    feedback = await get_or_404(db, Feedback, feedback_id, "Feedback")
    enforce(Operation.VIEW_FEEDBACK, caller, await resolve_feedback_chain(db, feedback))
    return FeedbackResponse.model_validate(feedback)


async def list_by_student(db: AsyncSession, caller: Caller, student_id: int) -> List[FeedbackResponse]:
    """All feedback for a student.

    Callers allowed on the student as a whole (admins, the class-teacher, the
    student) see everything. Other teachers see only the feedback given on
    their own subject assignments.
    """
    student = await get_or_404(db, StudentProfile, student_id, "Student")
    student_chain = await resolve_student_chain(db, student)
    result = await db.execute(
        select(Feedback).where(Feedback.student_id == student.id).order_by(Feedback.submission_date.desc())
    )
    records = list(result.scalars().all())
    if authorize(Operation.VIEW_FEEDBACK, caller, student_chain).allowed:
        return [FeedbackResponse.model_validate(f) for f in records]
    if not isinstance(caller, TeacherCaller) or caller.school_id != student_chain.school_id:
        enforce(Operation.VIEW_FEEDBACK, caller, student_chain)
    visible = []
    for feedback in records:
        if authorize(Operation.VIEW_FEEDBACK, caller, await resolve_feedback_chain(db, feedback)).allowed:
            visible.append(FeedbackResponse.model_validate(feedback))
    return visible


async def list_for_class_teacher(db: AsyncSession, caller: Caller, unread_only: bool = False) -> List[FeedbackResponse]:
    """Feedback on students of every class where the caller is class-teacher."""
    require_role(Operation.LIST_CLASS_TEACHER_FEEDBACK, caller)
    stmt = (
        select(Feedback)
        .join(StudentProfile, StudentProfile.id == Feedback.student_id)
        .join(SchoolClass, SchoolClass.id == StudentProfile.class_id)
        .where(SchoolClass.class_teacher_id == caller.user_id)
    )
    if unread_only:
        stmt = stmt.where(Feedback.is_read.is_(False))
    result = await db.execute(stmt.order_by(Feedback.submission_date.desc()))
    return [FeedbackResponse.model_validate(f) for f in result.scalars().all()]


async def mark_read(db: AsyncSession, caller: Caller, feedback_id: int) -> FeedbackResponse:
    feedback = await get_or_404(db, Feedback, feedback_id, "Feedback")
    enforce(Operation.MARK_FEEDBACK_READ, caller, await resolve_feedback_chain(db, feedback))
    feedback.is_read = True
    await db.commit()
    await db.refresh(feedback)
    logger.info("Feedback %s marked read by user %s", feedback.id, caller.user_id)
    return FeedbackResponse.model_validate(feedback)
