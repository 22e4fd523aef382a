from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import resolve_caller
from schoolapp.api.v1.admin import service as admin_service
from schoolapp.api.v1.admin.schemas import StudentCreate, TeacherCreate
from schoolapp.api.v1.attendance import service as attendance_service
from schoolapp.api.v1.attendance.schemas import AttendanceRecordItem, RecordAttendanceRequest
from schoolapp.api.v1.classes import service as class_service
from schoolapp.api.v1.classes.schemas import ClassCreate
from schoolapp.api.v1.dashboard import service as dashboard_service
from schoolapp.api.v1.feedback import service as feedback_service
from schoolapp.api.v1.feedback.schemas import FeedbackCreate
from schoolapp.api.v1.marks import service as mark_service
from schoolapp.api.v1.marks.schemas import MarkRequest
from schoolapp.api.v1.schools import service as school_service
from schoolapp.api.v1.students import service as student_service
from schoolapp.api.v1.subject_assignments import service as assignment_service
from schoolapp.api.v1.subject_assignments.schemas import SubjectAssignmentCreate, SubjectAssignmentUpdate
from schoolapp.api.v1.tasks import service as task_service
from schoolapp.api.v1.tasks.schemas import TaskCreate, TaskUpdate
from schoolapp.core.enums import AssignmentStatus, AttendanceStatus, TaskStatus, TaskType, UserRole
from schoolapp.core.exceptions import DuplicateError, ForbiddenError, InvalidArgumentError, NotFoundError
from schoolapp.core.models import Attendance, SchoolClass

MISSING_ID = 9999


async def caller_for(db: AsyncSession, user):
    return await resolve_caller(db, user.email)


def mark_payload(student, assignment, **overrides) -> MarkRequest:
    data = dict(
        student_id=student.id,
        subject_assignment_id=assignment.id,
        assessment_name="Unit test 1",
        marks_obtained=Decimal("18"),
        total_marks=Decimal("20"),
    )
    data.update(overrides)
    return MarkRequest(**data)


def due_in(days: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


@pytest.fixture()
async def world(db_session: AsyncSession, factory):
    """One school with a class-teacher T, a subject teacher U and two students; plus a second school."""
    school = await factory.school()
    other_school = await factory.school()
    t_user, t_profile = await factory.teacher(school)
    u_user, u_profile = await factory.teacher(school)
    school_class = await factory.school_class(school, class_teacher=t_user)
    other_class = await factory.school_class(other_school)
    s_user, s_profile = await factory.student(school_class)
    s2_user, s2_profile = await factory.student(school_class)
    assignment = await factory.assignment(school_class, u_profile)
    return dict(
        school=school,
        other_school=other_school,
        school_class=school_class,
        other_class=other_class,
        principal=await factory.principal(school),
        other_principal=await factory.principal(other_school),
        t_user=t_user,
        t_profile=t_profile,
        u_user=u_user,
        u_profile=u_profile,
        s_user=s_user,
        s_profile=s_profile,
        s2_user=s2_user,
        s2_profile=s2_profile,
        assignment=assignment,
    )


# ----- P1: existence precedes authorization -----
@pytest.mark.asyncio
async def test_missing_records_are_not_found_even_for_denied_callers(db_session: AsyncSession, world) -> None:
    student = await caller_for(db_session, world["s_user"])
    with pytest.raises(NotFoundError):
        await mark_service.get_mark(db_session, student, MISSING_ID)
    with pytest.raises(NotFoundError):
        await class_service.delete_class(db_session, student, MISSING_ID)
    with pytest.raises(NotFoundError):
        await assignment_service.delete_assignment(db_session, student, MISSING_ID)
    with pytest.raises(NotFoundError):
        await attendance_service.list_by_class_and_date(db_session, student, MISSING_ID, date(2024, 9, 2))
    with pytest.raises(NotFoundError):
        await feedback_service.mark_read(db_session, student, MISSING_ID)
    with pytest.raises(NotFoundError):
        await task_service.delete_task(db_session, student, MISSING_ID)
    with pytest.raises(NotFoundError):
        await mark_service.enter_mark(
            db_session, student, mark_payload(world["s_profile"], world["assignment"], subject_assignment_id=MISSING_ID)
        )

    other_admin = await caller_for(db_session, world["other_principal"])
    with pytest.raises(NotFoundError):
        await assignment_service.create_assignment(
            db_session,
            other_admin,
            SubjectAssignmentCreate(
                class_id=world["school_class"].id,
                subject_id=world["assignment"].subject_id,
                teacher_id=MISSING_ID,
                academic_year="2024-2025",
                term="Term 2",
            ),
        )
    with pytest.raises(NotFoundError):
        await assignment_service.update_assignment(
            db_session, other_admin, world["assignment"].id, SubjectAssignmentUpdate(teacher_id=MISSING_ID)
        )
    with pytest.raises(NotFoundError):
        await class_service.assign_class_teacher(db_session, other_admin, world["school_class"].id, MISSING_ID)
    with pytest.raises(NotFoundError):
        await class_service.create_class(
            db_session,
            other_admin,
            ClassCreate(name="7B", school_id=world["school"].id, class_teacher_id=MISSING_ID),
        )


# ----- P2: self access -----
@pytest.mark.asyncio
async def test_student_sees_own_marks_only(db_session: AsyncSession, world) -> None:
    u = await caller_for(db_session, world["u_user"])
    await mark_service.enter_mark(db_session, u, mark_payload(world["s_profile"], world["assignment"]))
    await mark_service.enter_mark(db_session, u, mark_payload(world["s2_profile"], world["assignment"]))

    student = await caller_for(db_session, world["s_user"])
    own = await mark_service.list_by_student(db_session, student, world["s_profile"].id)
    assert [m.student_id for m in own] == [world["s_profile"].id]
    own_by_user = await mark_service.list_by_student_user(db_session, student, world["s_user"].id)
    assert len(own_by_user) == 1

    with pytest.raises(ForbiddenError):
        await mark_service.list_by_student(db_session, student, world["s2_profile"].id)
    with pytest.raises(ForbiddenError):
        await mark_service.list_by_assignment(db_session, student, world["assignment"].id)


# ----- P3: admin school scoping -----
@pytest.mark.asyncio
async def test_admin_acts_only_inside_own_school(db_session: AsyncSession, world) -> None:
    other_admin = await caller_for(db_session, world["other_principal"])
    with pytest.raises(ForbiddenError):
        await class_service.get_class(db_session, other_admin, world["school_class"].id)
    with pytest.raises(ForbiddenError):
        await mark_service.list_by_assignment(db_session, other_admin, world["assignment"].id)
    with pytest.raises(ForbiddenError):
        await attendance_service.list_by_class_and_date(
            db_session, other_admin, world["school_class"].id, date(2024, 9, 2)
        )

    admin = await caller_for(db_session, world["principal"])
    assert (await class_service.get_class(db_session, admin, world["school_class"].id)).id == world["school_class"].id


@pytest.mark.asyncio
async def test_admin_without_school_is_denied(db_session: AsyncSession, factory, world) -> None:
    orphan = await caller_for(db_session, await factory.principal(None))
    with pytest.raises(ForbiddenError):
        await class_service.get_class(db_session, orphan, world["school_class"].id)
    with pytest.raises(ForbiddenError):
        await class_service.list_classes(db_session, orphan)


# ----- P4: class-teacher vs subject-teacher -----
@pytest.mark.asyncio
async def test_class_teacher_records_and_subject_teacher_views_attendance(db_session: AsyncSession, world) -> None:
    day = date(2024, 9, 2)
    request = RecordAttendanceRequest(
        class_id=world["school_class"].id,
        attendance_date=day,
        records=[AttendanceRecordItem(student_id=world["s_profile"].id, status=AttendanceStatus.PRESENT)],
    )
    t = await caller_for(db_session, world["t_user"])
    u = await caller_for(db_session, world["u_user"])

    rows = await attendance_service.record_attendance(db_session, t, request)
    assert rows[0].recorded_by_teacher_id == world["t_profile"].id

    with pytest.raises(ForbiddenError):
        await attendance_service.record_attendance(db_session, u, request)

    seen = await attendance_service.get_by_student_and_date(db_session, u, world["s_profile"].id, day)
    assert seen.status == AttendanceStatus.PRESENT
    period = await attendance_service.list_by_student_and_period(
        db_session, u, world["s_profile"].id, day, day + timedelta(days=7)
    )
    assert len(period) == 1


# ----- P5: attendance upsert -----
@pytest.mark.asyncio
async def test_recording_twice_updates_existing_row(db_session: AsyncSession, world) -> None:
    t = await caller_for(db_session, world["t_user"])
    day = date(2024, 9, 3)
    for status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
        await attendance_service.record_attendance(
            db_session,
            t,
            RecordAttendanceRequest(
                class_id=world["school_class"].id,
                attendance_date=day,
                records=[AttendanceRecordItem(student_id=world["s_profile"].id, status=status, remarks="bus")],
            ),
        )

    count = await db_session.scalar(
        select(func.count()).select_from(Attendance).where(Attendance.student_id == world["s_profile"].id)
    )
    assert count == 1
    row = await attendance_service.get_by_student_and_date(db_session, t, world["s_profile"].id, day)
    assert row.status == AttendanceStatus.LATE


@pytest.mark.asyncio
async def test_attendance_rejects_student_from_another_class(db_session: AsyncSession, factory, world) -> None:
    _, outsider = await factory.student(await factory.school_class(world["school"]))
    t = await caller_for(db_session, world["t_user"])
    with pytest.raises(InvalidArgumentError):
        await attendance_service.record_attendance(
            db_session,
            t,
            RecordAttendanceRequest(
                class_id=world["school_class"].id,
                attendance_date=date(2024, 9, 4),
                records=[AttendanceRecordItem(student_id=outsider.id, status=AttendanceStatus.ABSENT)],
            ),
        )


@pytest.mark.asyncio
async def test_admin_records_attendance_in_own_school(db_session: AsyncSession, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    rows = await attendance_service.record_attendance(
        db_session,
        admin,
        RecordAttendanceRequest(
            class_id=world["school_class"].id,
            attendance_date=date(2024, 9, 5),
            records=[AttendanceRecordItem(student_id=world["s2_profile"].id, status=AttendanceStatus.EXCUSED)],
        ),
    )
    assert rows[0].recorded_by_teacher_id is None


# ----- P6: student task updates -----
@pytest.mark.asyncio
async def test_student_may_only_change_task_status(db_session: AsyncSession, world) -> None:
    t = await caller_for(db_session, world["t_user"])
    task = await task_service.create_task(
        db_session,
        t,
        TaskCreate(
            title="Essay",
            due_date=due_in(3),
            task_type=TaskType.HOMEWORK,
            student_id=world["s_profile"].id,
        ),
    )
    student = await caller_for(db_session, world["s_user"])

    updated = await task_service.update_task(db_session, student, task.id, TaskUpdate(status=TaskStatus.COMPLETED))
    assert updated.status == TaskStatus.COMPLETED

    with pytest.raises(InvalidArgumentError):
        await task_service.update_task(
            db_session, student, task.id, TaskUpdate(status=TaskStatus.IN_PROGRESS, title="Shorter essay")
        )
    assert (await task_service.get_task(db_session, student, task.id)).title == "Essay"

    other_student = await caller_for(db_session, world["s2_user"])
    with pytest.raises(ForbiddenError):
        await task_service.update_task(db_session, other_student, task.id, TaskUpdate(status=TaskStatus.PENDING))


# ----- Subject assignments -----
@pytest.mark.asyncio
async def test_assignment_creation_checks_school_and_uniqueness(db_session: AsyncSession, factory, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    subject = await factory.subject()
    payload = SubjectAssignmentCreate(
        class_id=world["school_class"].id,
        subject_id=subject.id,
        teacher_id=world["t_profile"].id,
        academic_year="2024-2025",
        term="Term 2",
    )
    created = await assignment_service.create_assignment(db_session, admin, payload)
    assert created.status == AssignmentStatus.ACTIVE

    with pytest.raises(DuplicateError):
        await assignment_service.create_assignment(db_session, admin, payload)

    _, foreign_teacher = await factory.teacher(world["other_school"])
    with pytest.raises(InvalidArgumentError):
        await assignment_service.create_assignment(
            db_session, admin, payload.model_copy(update={"teacher_id": foreign_teacher.id, "term": "Term 3"})
        )

    with pytest.raises(ForbiddenError):
        await assignment_service.create_assignment(
            db_session, admin, payload.model_copy(update={"class_id": world["other_class"].id})
        )


@pytest.mark.asyncio
async def test_assignment_status_update_and_listing(db_session: AsyncSession, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    updated = await assignment_service.update_assignment(
        db_session, admin, world["assignment"].id, SubjectAssignmentUpdate(status=AssignmentStatus.COMPLETED)
    )
    assert updated.status == AssignmentStatus.COMPLETED

    teacher = await caller_for(db_session, world["u_user"])
    by_teacher = await assignment_service.list_by_teacher(db_session, teacher, world["u_profile"].id)
    assert [a.id for a in by_teacher] == [world["assignment"].id]

    other_admin = await caller_for(db_session, world["other_principal"])
    assert await assignment_service.list_by_subject(db_session, other_admin, world["assignment"].subject_id) == []
    with pytest.raises(ForbiddenError):
        await assignment_service.update_assignment(
            db_session, other_admin, world["assignment"].id, SubjectAssignmentUpdate(term="Term 9")
        )


# ----- Marks -----
@pytest.mark.asyncio
async def test_mark_guard_and_recorder_rules(db_session: AsyncSession, factory, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    second_class = await factory.school_class(world["school"])
    _, outsider = await factory.student(second_class)
    with pytest.raises(InvalidArgumentError):
        await mark_service.enter_mark(db_session, admin, mark_payload(outsider, world["assignment"]))

    t = await caller_for(db_session, world["t_user"])
    mark = await mark_service.enter_mark(db_session, t, mark_payload(world["s_profile"], world["assignment"]))
    assert mark.recorded_by_teacher_id == world["t_profile"].id

    with pytest.raises(InvalidArgumentError):
        await mark_service.update_mark(
            db_session, t, mark.id, mark_payload(world["s2_profile"], world["assignment"])
        )

    updated = await mark_service.update_mark(
        db_session, t, mark.id, mark_payload(world["s_profile"], world["assignment"], marks_obtained=Decimal("19"))
    )
    assert updated.marks_obtained == Decimal("19")

    stranger_user, _ = await factory.teacher(world["school"])
    stranger = await caller_for(db_session, stranger_user)
    with pytest.raises(ForbiddenError):
        await mark_service.delete_mark(db_session, stranger, mark.id)

    await mark_service.delete_mark(db_session, admin, mark.id)
    with pytest.raises(NotFoundError):
        await mark_service.get_mark(db_session, admin, mark.id)


# ----- Feedback -----
@pytest.mark.asyncio
async def test_feedback_flow_from_subject_teacher_to_class_teacher(db_session: AsyncSession, factory, world) -> None:
    u = await caller_for(db_session, world["u_user"])
    t = await caller_for(db_session, world["t_user"])
    feedback = await feedback_service.submit_feedback(
        db_session,
        u,
        FeedbackCreate(
            student_id=world["s_profile"].id,
            subject_assignment_id=world["assignment"].id,
            feedback_text="Great progress in algebra",
        ),
    )
    assert feedback.is_read is False

    with pytest.raises(ForbiddenError):
        await feedback_service.submit_feedback(
            db_session,
            t,
            FeedbackCreate(
                student_id=world["s_profile"].id,
                subject_assignment_id=world["assignment"].id,
                feedback_text="Not my assignment",
            ),
        )

    unread = await feedback_service.list_for_class_teacher(db_session, t, unread_only=True)
    assert [f.id for f in unread] == [feedback.id]

    with pytest.raises(ForbiddenError):
        await feedback_service.mark_read(db_session, u, feedback.id)
    read = await feedback_service.mark_read(db_session, t, feedback.id)
    assert read.is_read is True
    assert await feedback_service.list_for_class_teacher(db_session, t, unread_only=True) == []

    student = await caller_for(db_session, world["s_user"])
    assert len(await feedback_service.list_by_student(db_session, student, world["s_profile"].id)) == 1
    assert len(await feedback_service.list_by_student(db_session, u, world["s_profile"].id)) == 1
    other_student = await caller_for(db_session, world["s2_user"])
    with pytest.raises(ForbiddenError):
        await feedback_service.get_feedback(db_session, other_student, feedback.id)

    foreign_user, _ = await factory.teacher(world["other_school"])
    foreign_teacher = await caller_for(db_session, foreign_user)
    with pytest.raises(ForbiddenError):
        await feedback_service.list_by_student(db_session, foreign_teacher, world["s_profile"].id)


# ----- Tasks -----
@pytest.mark.asyncio
async def test_task_creation_rules(db_session: AsyncSession, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    base = dict(title="Project", due_date=due_in(7), task_type=TaskType.PROJECT, class_id=world["school_class"].id)

    with pytest.raises(InvalidArgumentError):
        await task_service.create_task(db_session, admin, TaskCreate(**base))

    task = await task_service.create_task(db_session, admin, TaskCreate(teacher_id=world["u_profile"].id, **base))
    assert task.teacher_id == world["u_profile"].id

    u = await caller_for(db_session, world["u_user"])
    with pytest.raises(InvalidArgumentError):
        await task_service.create_task(db_session, u, TaskCreate(teacher_id=world["t_profile"].id, **base))

    other_admin = await caller_for(db_session, world["other_principal"])
    with pytest.raises(ForbiddenError):
        await task_service.create_task(db_session, other_admin, TaskCreate(teacher_id=world["u_profile"].id, **base))


@pytest.mark.asyncio
async def test_task_listing_is_scoped_to_caller(db_session: AsyncSession, world) -> None:
    t = await caller_for(db_session, world["t_user"])
    u = await caller_for(db_session, world["u_user"])
    personal = await task_service.create_task(
        db_session, t, TaskCreate(title="Read", due_date=due_in(2), task_type=TaskType.HOMEWORK, student_id=world["s_profile"].id)
    )
    class_wide = await task_service.create_task(
        db_session, u, TaskCreate(title="Lab", due_date=due_in(4), task_type=TaskType.ASSIGNMENT, class_id=world["school_class"].id)
    )
    other = await task_service.create_task(
        db_session, t, TaskCreate(title="Other", due_date=due_in(5), task_type=TaskType.OTHER, student_id=world["s2_profile"].id)
    )

    student = await caller_for(db_session, world["s_user"])
    assert [x.id for x in await task_service.list_tasks(db_session, student)] == [personal.id, class_wide.id]
    assert [x.id for x in await task_service.list_tasks(db_session, t)] == [personal.id, other.id]
    assert await task_service.list_tasks(db_session, student, student_id=world["s2_profile"].id) == []

    with pytest.raises(ForbiddenError):
        await task_service.update_task(db_session, student, class_wide.id, TaskUpdate(status=TaskStatus.COMPLETED))


# ----- Dashboard -----
@pytest.mark.asyncio
async def test_student_dashboard_summary(db_session: AsyncSession, world) -> None:
    t = await caller_for(db_session, world["t_user"])
    for i in range(6):
        await task_service.create_task(
            db_session,
            t,
            TaskCreate(title=f"Task {i}", due_date=due_in(i + 1), task_type=TaskType.HOMEWORK, student_id=world["s_profile"].id),
        )
    await mark_service.enter_mark(db_session, t, mark_payload(world["s_profile"], world["assignment"]))
    await mark_service.enter_mark(
        db_session,
        t,
        mark_payload(world["s_profile"], world["assignment"], marks_obtained=Decimal("15"), total_marks=Decimal("30")),
    )

    student = await caller_for(db_session, world["s_user"])
    summary = await dashboard_service.get_student_dashboard(db_session, student)
    assert summary.pending_tasks_count == 6
    assert [x.title for x in summary.recent_pending_tasks] == [f"Task {i}" for i in range(5)]
    assert summary.recent_pending_tasks[0].subject_name == "General Task"
    assert len(summary.performance_summary) == 1
    assert summary.performance_summary[0].average_percentage == Decimal("66.00")

    with pytest.raises(ForbiddenError):
        await dashboard_service.get_student_dashboard(db_session, t)


# ----- Admin provisioning and students -----
@pytest.mark.asyncio
async def test_principal_provisions_members_of_own_school(db_session: AsyncSession, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    teacher = await admin_service.create_teacher(
        db_session,
        admin,
        TeacherCreate(
            first_name="Ada",
            last_name="Lovelace",
            email="ada@school.edu",
            password="secret123",
            role=UserRole.TEACHER,
            subjects=["Maths", "Maths ", "Physics"],
        ),
    )
    assert teacher.user.school_id == world["school"].id
    assert teacher.subjects == ["Maths", "Physics"]

    student_payload = dict(first_name="Bo", last_name="Li", email="bo@school.edu", password="secret123")
    with pytest.raises(InvalidArgumentError):
        await admin_service.create_student(
            db_session, admin, StudentCreate(role=UserRole.TEACHER, class_id=world["school_class"].id, **student_payload)
        )
    with pytest.raises(InvalidArgumentError):
        await admin_service.create_student(
            db_session, admin, StudentCreate(role=UserRole.STUDENT, class_id=world["other_class"].id, **student_payload)
        )
    created = await admin_service.create_student(
        db_session, admin, StudentCreate(role=UserRole.STUDENT, class_id=world["school_class"].id, **student_payload)
    )
    assert created.class_id == world["school_class"].id

    with pytest.raises(DuplicateError):
        await admin_service.create_student(
            db_session, admin, StudentCreate(role=UserRole.STUDENT, class_id=world["school_class"].id, **student_payload)
        )


@pytest.mark.asyncio
async def test_student_reassignment_stays_in_school(db_session: AsyncSession, factory, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    new_class = await factory.school_class(world["school"])
    moved = await student_service.reassign_class(db_session, admin, world["s_profile"].id, new_class.id)
    assert moved.class_id == new_class.id

    with pytest.raises(InvalidArgumentError):
        await student_service.reassign_class(db_session, admin, world["s_profile"].id, world["other_class"].id)


# ----- Deleting classes and schools -----
@pytest.mark.asyncio
async def test_class_with_students_or_attendance_cannot_be_deleted(db_session: AsyncSession, factory, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    with pytest.raises(InvalidArgumentError) as exc:
        await class_service.delete_class(db_session, admin, world["school_class"].id)
    assert exc.value.message == "Class still has enrolled students"

    # Attendance recorded in a class outlives the student's move to another class.
    old_class = await factory.school_class(world["school"])
    new_class = await factory.school_class(world["school"])
    _, student = await factory.student(old_class)
    db_session.add(
        Attendance(
            student_id=student.id,
            class_id=old_class.id,
            attendance_date=date(2024, 9, 2),
            status=AttendanceStatus.PRESENT.value,
        )
    )
    student.class_id = new_class.id
    await db_session.commit()
    with pytest.raises(InvalidArgumentError):
        await class_service.delete_class(db_session, admin, old_class.id)

    empty_class = await factory.school_class(world["school"])
    await class_service.delete_class(db_session, admin, empty_class.id)
    remaining = await db_session.execute(
        select(func.count()).select_from(SchoolClass).where(SchoolClass.id == empty_class.id)
    )
    assert remaining.scalar_one() == 0


@pytest.mark.asyncio
async def test_school_with_enrolled_students_cannot_be_deleted(db_session: AsyncSession, factory, world) -> None:
    super_admin = await caller_for(db_session, await factory.super_admin())
    with pytest.raises(InvalidArgumentError):
        await school_service.delete_school(db_session, super_admin, world["school"].id)

    # The other school only has an empty class; its classes go with it.
    await school_service.delete_school(db_session, super_admin, world["other_school"].id)
    remaining = await db_session.execute(
        select(func.count()).select_from(SchoolClass).where(SchoolClass.school_id == world["other_school"].id)
    )
    assert remaining.scalar_one() == 0


@pytest.mark.asyncio
async def test_class_teacher_must_be_a_teacher_of_the_school(db_session: AsyncSession, factory, world) -> None:
    admin = await caller_for(db_session, world["principal"])
    with pytest.raises(InvalidArgumentError):
        await class_service.assign_class_teacher(db_session, admin, world["school_class"].id, world["s_user"].id)
    foreign_user, _ = await factory.teacher(world["other_school"])
    with pytest.raises(InvalidArgumentError):
        await class_service.assign_class_teacher(db_session, admin, world["school_class"].id, foreign_user.id)

    updated = await class_service.assign_class_teacher(db_session, admin, world["school_class"].id, world["u_user"].id)
    assert updated.class_teacher_id == world["u_user"].id


def test_task_due_date_is_compared_in_utc() -> None:
    naive_future = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(hours=1)
    task = TaskCreate(title="Essay", due_date=naive_future, task_type=TaskType.HOMEWORK, class_id=1)
    assert task.due_date.utcoffset() == timedelta(0)

    with pytest.raises(ValidationError):
        TaskCreate(title="Essay", due_date=due_in(-1), task_type=TaskType.HOMEWORK, class_id=1)
    with pytest.raises(ValidationError):
        TaskUpdate(due_date=datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=5))
