"""Ownership chains: school -> class -> class-teacher / students / active subject teachers.

Resolvers read already-loaded records plus the few lookups needed to reach the
class and school. They never modify the session.
"""

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.auth.models import User
from schoolapp.core.enums import AssignmentStatus
from schoolapp.core.models import (
    Attendance,
    Feedback,
    Mark,
    SchoolClass,
    StudentProfile,
    SubjectAssignment,
    Task,
    TeacherProfile,
)


@dataclass(frozen=True)
class Chain:
    """Immutable projection of a record's ownership path.

    class_* fields describe the class the record hangs off. For records tied to
    a student (marks, feedback, attendance views, tasks) that is the student's
    current class; assignment_* fields keep the subject assignment's own class
    and teacher.
    """

    school_id: Optional[int] = None
    class_id: Optional[int] = None
    class_teacher_user_id: Optional[int] = None
    enrolled_student_ids: FrozenSet[int] = frozenset()
    active_teacher_profile_ids: FrozenSet[int] = frozenset()
    assignment_id: Optional[int] = None
    assignment_class_id: Optional[int] = None
    assignment_teacher_profile_id: Optional[int] = None
    assignment_status: Optional[str] = None
    student_id: Optional[int] = None
    recorded_by_teacher_id: Optional[int] = None
    task_teacher_id: Optional[int] = None


def school_chain(school_id: Optional[int]) -> Chain:
    """Chain for school-level targets (the school itself, users created in it)."""
    return Chain(school_id=school_id)


async def _enrolled_student_ids(db: AsyncSession, class_id: int) -> FrozenSet[int]:
    result = await db.execute(select(StudentProfile.id).where(StudentProfile.class_id == class_id))
    return frozenset(result.scalars().all())


async def _active_teacher_profile_ids(db: AsyncSession, class_ids: Iterable[int]) -> FrozenSet[int]:
    ids = [cid for cid in class_ids if cid is not None]
    if not ids:
        return frozenset()
    result = await db.execute(
        select(SubjectAssignment.teacher_id).where(
            SubjectAssignment.class_id.in_(ids),
            SubjectAssignment.status == AssignmentStatus.ACTIVE.value,
        )
    )
    return frozenset(result.scalars().all())


async def resolve_class_chain(db: AsyncSession, school_class: SchoolClass) -> Chain:
    return Chain(
        school_id=school_class.school_id,
        class_id=school_class.id,
        class_teacher_user_id=school_class.class_teacher_id,
        enrolled_student_ids=await _enrolled_student_ids(db, school_class.id),
        active_teacher_profile_ids=await _active_teacher_profile_ids(db, [school_class.id]),
    )


async def _class_chain_by_id(db: AsyncSession, class_id: Optional[int]) -> Chain:
    if class_id is None:
        return Chain()
    school_class = await db.get(SchoolClass, class_id)
    if school_class is None:
        return Chain(class_id=class_id)
    return await resolve_class_chain(db, school_class)


async def resolve_assignment_chain(db: AsyncSession, assignment: SubjectAssignment) -> Chain:
    chain = await _class_chain_by_id(db, assignment.class_id)
    return replace(
        chain,
        assignment_id=assignment.id,
        assignment_class_id=assignment.class_id,
        assignment_teacher_profile_id=assignment.teacher_id,
        assignment_status=assignment.status,
    )


async def resolve_student_chain(db: AsyncSession, student: StudentProfile) -> Chain:
    chain = await _class_chain_by_id(db, student.class_id)
    return replace(chain, student_id=student.id)


async def resolve_student_assignment_chain(
    db: AsyncSession,
    student: StudentProfile,
    assignment: SubjectAssignment,
    recorded_by_teacher_id: Optional[int] = None,
) -> Chain:
    """Chain for a (student, subject assignment) pair: marks and feedback, existing or intended."""
    chain = await resolve_student_chain(db, student)
    return replace(
        chain,
        assignment_id=assignment.id,
        assignment_class_id=assignment.class_id,
        assignment_teacher_profile_id=assignment.teacher_id,
        assignment_status=assignment.status,
        recorded_by_teacher_id=recorded_by_teacher_id,
    )


async def resolve_mark_chain(db: AsyncSession, mark: Mark) -> Chain:
    student = await db.get(StudentProfile, mark.student_id)
    assignment = await db.get(SubjectAssignment, mark.subject_assignment_id)
    return await resolve_student_assignment_chain(db, student, assignment, mark.recorded_by_teacher_id)


async def resolve_feedback_chain(db: AsyncSession, feedback: Feedback) -> Chain:
    student = await db.get(StudentProfile, feedback.student_id)
    assignment = await db.get(SubjectAssignment, feedback.subject_assignment_id)
    return await resolve_student_assignment_chain(db, student, assignment)


async def resolve_attendance_chain(db: AsyncSession, attendance: Attendance) -> Chain:
    # Anchored on the class recorded with the attendance, not the student's current class.
    chain = await _class_chain_by_id(db, attendance.class_id)
    return replace(
        chain,
        student_id=attendance.student_id,
        recorded_by_teacher_id=attendance.recorded_by_teacher_id,
    )


async def resolve_task_chain(
    db: AsyncSession,
    *,
    teacher_id: Optional[int],
    student_id: Optional[int],
    class_id: Optional[int],
    assignment_id: Optional[int] = None,
) -> Chain:
    """Chain for a task, existing or intended.

    The anchor class is the task's class, else the assigned student's class.
    Active subject teachers of either class count as touching the task.
    """
    student_class_id = None
    if student_id is not None:
        student = await db.get(StudentProfile, student_id)
        student_class_id = student.class_id if student else None
    anchor_class_id = class_id if class_id is not None else student_class_id
    chain = await _class_chain_by_id(db, anchor_class_id)
    active = await _active_teacher_profile_ids(db, {anchor_class_id, student_class_id})
    if chain.school_id is None and teacher_id is not None:
        chain = replace(chain, school_id=await teacher_school_id(db, teacher_id))
    return replace(
        chain,
        active_teacher_profile_ids=active,
        student_id=student_id,
        task_teacher_id=teacher_id,
        assignment_id=assignment_id,
    )


async def resolve_existing_task_chain(db: AsyncSession, task: Task) -> Chain:
    return await resolve_task_chain(
        db,
        teacher_id=task.teacher_id,
        student_id=task.student_id,
        class_id=task.class_id,
        assignment_id=task.subject_assignment_id,
    )


async def teacher_school_id(db: AsyncSession, teacher_profile_id: int) -> Optional[int]:
    profile = await db.get(TeacherProfile, teacher_profile_id)
    if profile is None:
        return None
    user = await db.get(User, profile.user_id)
    return user.school_id if user else None


async def resolve_teacher_chain(db: AsyncSession, teacher: TeacherProfile) -> Chain:
    """Chain for a teacher profile as a target (listing their tasks or assignments)."""
    return Chain(
        school_id=await teacher_school_id(db, teacher.id),
        task_teacher_id=teacher.id,
        assignment_teacher_profile_id=teacher.id,
    )
