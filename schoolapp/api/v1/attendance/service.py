import logging
from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import resolve_attendance_chain, resolve_class_chain, resolve_student_chain
from schoolapp.access.identity import Caller, TeacherCaller
from schoolapp.access.policy import Operation, enforce
from schoolapp.core.exceptions import InvalidArgumentError, NotFoundError
from schoolapp.core.models import Attendance, SchoolClass, StudentProfile
from schoolapp.core.services import commit_or_conflict, get_or_404

from .schemas import AttendanceResponse, RecordAttendanceRequest

logger = logging.getLogger(__name__)


async def record_attendance(
    db: AsyncSession,
    caller: Caller,
    payload: RecordAttendanceRequest,
) -> List[AttendanceResponse]:
    """Record one day of attendance for a class.

    Existing rows for the same student and date are overwritten. The stored
    class is the student's class at recording time.
    """
    school_class = await get_or_404(db, SchoolClass, payload.class_id, "Class")
    students = [await get_or_404(db, StudentProfile, item.student_id, "Student") for item in payload.records]
    enforce(Operation.RECORD_ATTENDANCE, caller, await resolve_class_chain(db, school_class))
    guard.ensure_students_in_class(students, school_class.id)
    if len({s.id for s in students}) != len(students):
        raise InvalidArgumentError("Each student may appear only once per attendance submission")

    recorded_by = caller.teacher_profile_id if isinstance(caller, TeacherCaller) else None
    rows = []
    for student, item in zip(students, payload.records):
        attendance = await guard.find_attendance(db, student.id, payload.attendance_date)
        if attendance is None:
            attendance = Attendance(student_id=student.id, attendance_date=payload.attendance_date)
            db.add(attendance)
        attendance.class_id = student.class_id
        attendance.status = item.status.value
        attendance.remarks = item.remarks
        attendance.recorded_by_teacher_id = recorded_by
        rows.append(attendance)
    await commit_or_conflict(db, "Attendance for this student and date was recorded concurrently")
    for attendance in rows:
        await db.refresh(attendance)
    logger.info(
        "Attendance recorded for class %s on %s: %d students",
        school_class.id, payload.attendance_date, len(rows),
    )
    return [AttendanceResponse.model_validate(a) for a in rows]


async def get_by_student_and_date(
    db: AsyncSession,
    caller: Caller,
    student_id: int,
    att_date: date,
) -> AttendanceResponse:
    await get_or_404(db, StudentProfile, student_id, "Student")
    attendance = await guard.find_attendance(db, student_id, att_date)
    if attendance is None:
        raise NotFoundError("Attendance record not found")
    enforce(Operation.VIEW_ATTENDANCE, caller, await resolve_attendance_chain(db, attendance))
    return AttendanceResponse.model_validate(attendance)


async def list_by_class_and_date(
    db: AsyncSession,
    caller: Caller,
    class_id: int,
    att_date: date,
) -> List[AttendanceResponse]:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    enforce(Operation.VIEW_ATTENDANCE, caller, await resolve_class_chain(db, school_class))
    result = await db.execute(
        select(Attendance)
        .where(Attendance.class_id == class_id, Attendance.attendance_date == att_date)
        .order_by(Attendance.student_id)
    )
    return [AttendanceResponse.model_validate(a) for a in result.scalars().all()]


async def list_by_student_and_period(
    db: AsyncSession,
    caller: Caller,
    student_id: int,
    start_date: date,
    end_date: date,
) -> List[AttendanceResponse]:
    student = await get_or_404(db, StudentProfile, student_id, "Student")
    if start_date > end_date:
        raise InvalidArgumentError("start_date must not be after end_date")
    enforce(Operation.VIEW_ATTENDANCE, caller, await resolve_student_chain(db, student))
    result = await db.execute(
        select(Attendance)
        .where(
            Attendance.student_id == student_id,
            Attendance.attendance_date >= start_date,
            Attendance.attendance_date <= end_date,
        )
        .order_by(Attendance.attendance_date)
    )
    return [AttendanceResponse.model_validate(a) for a in result.scalars().all()]
