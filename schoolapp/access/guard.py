"""Cross-entity invariants checked after authorization and before persistence."""

from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.auth.models import User
from schoolapp.core.enums import UserRole
from schoolapp.core.exceptions import DuplicateError, InvalidArgumentError
from schoolapp.core.models import Attendance, Mark, SchoolClass, StudentProfile, SubjectAssignment


def ensure_student_in_class(student: StudentProfile, assignment: SubjectAssignment) -> None:
    if student.class_id != assignment.class_id:
        raise InvalidArgumentError("Student does not belong to the class of the subject assignment")


def ensure_same_school(school_id: Optional[int], expected_school_id: Optional[int], what: str) -> None:
    if school_id is None or school_id != expected_school_id:
        raise InvalidArgumentError(f"{what} does not belong to this school")


def ensure_role(requested: UserRole, expected: UserRole) -> None:
    """Role-specific creation endpoints only accept their own role."""
    if requested != expected:
        raise InvalidArgumentError(f"Role must be {expected.value} for this request")


def ensure_teacher_user(user: User, school_id: int) -> User:
    if user.role != UserRole.TEACHER.value:
        raise InvalidArgumentError("Selected user is not a teacher")
    ensure_same_school(user.school_id, school_id, "Teacher")
    return user


def ensure_class_in_school(school_class: SchoolClass, school_id: Optional[int]) -> None:
    ensure_same_school(school_class.school_id, school_id, "Class")


def ensure_students_in_class(students: Iterable[StudentProfile], class_id: int) -> None:
    for student in students:
        if student.class_id != class_id:
            raise InvalidArgumentError(f"Student {student.id} does not belong to class {class_id}")


def ensure_status_only(fields: Iterable[str]) -> None:
    """Students may change a task's status and nothing else."""
    extra = sorted(f for f in fields if f != "status")
    if extra:
        raise InvalidArgumentError(f"Students may only update task status; unexpected fields: {', '.join(extra)}")


async def ensure_email_available(db: AsyncSession, email: str) -> None:
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise DuplicateError("Email is already registered")


async def ensure_assignment_unique(
    db: AsyncSession,
    *,
    class_id: int,
    subject_id: int,
    teacher_id: int,
    academic_year: str,
    term: str,
    exclude_id: Optional[int] = None,
) -> None:
    stmt = select(SubjectAssignment.id).where(
        SubjectAssignment.class_id == class_id,
        SubjectAssignment.subject_id == subject_id,
        SubjectAssignment.teacher_id == teacher_id,
        SubjectAssignment.academic_year == academic_year,
        SubjectAssignment.term == term,
    )
    if exclude_id is not None:
        stmt = stmt.where(SubjectAssignment.id != exclude_id)
    result = await db.execute(stmt)
    if result.scalar_one_or_none() is not None:
        raise DuplicateError("This subject assignment already exists")


async def find_attendance(db: AsyncSession, student_id: int, att_date: date) -> Optional[Attendance]:
    """Existing row for the upsert path of attendance recording."""
    result = await db.execute(
        select(Attendance).where(
            Attendance.student_id == student_id,
            Attendance.attendance_date == att_date,
        )
    )
    return result.scalar_one_or_none()


def ensure_same_mark_target(mark: Mark, student_id: int, subject_assignment_id: int) -> None:
    """A mark update never moves the mark to another student or assignment."""
    if mark.student_id != student_id or mark.subject_assignment_id != subject_assignment_id:
        raise InvalidArgumentError(
            "Student or subject assignment cannot be changed on a mark; delete and re-create it instead"
        )


def ensure_task_targets(
    student: Optional[StudentProfile],
    school_class: Optional[SchoolClass],
    assignment: Optional[SubjectAssignment],
    school_id: Optional[int],
    assigner_school_id: Optional[int],
) -> None:
    """A task's student, class and subject assignment must agree with each other and with the assigner's school."""
    if student is None and school_class is None:
        raise InvalidArgumentError("Task must be assigned to either a student or a class")
    if student is not None and school_class is not None and student.class_id != school_class.id:
        raise InvalidArgumentError("Student does not belong to the task's class")
    if assignment is not None:
        anchor_class_id = school_class.id if school_class is not None else student.class_id
        if assignment.class_id != anchor_class_id:
            raise InvalidArgumentError("Subject assignment does not belong to the task's class")
    ensure_same_school(assigner_school_id, school_id, "Assigning teacher")


async def ensure_class_empty(db: AsyncSession, class_id: int) -> None:
    """Enrolled students and recorded attendance keep a class alive."""
    students = await db.execute(select(StudentProfile.id).where(StudentProfile.class_id == class_id).limit(1))
    if students.scalar_one_or_none() is not None:
        raise InvalidArgumentError("Class still has enrolled students")
    attendance = await db.execute(select(Attendance.id).where(Attendance.class_id == class_id).limit(1))
    if attendance.scalar_one_or_none() is not None:
        raise InvalidArgumentError("Class still has attendance records")


async def ensure_school_empty(db: AsyncSession, school_id: int) -> None:
    result = await db.execute(select(SchoolClass.id).where(SchoolClass.school_id == school_id))
    for class_id in result.scalars().all():
        await ensure_class_empty(db, class_id)
