import logging
from enum import Enum
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access import guard
from schoolapp.access.chain import resolve_existing_task_chain, resolve_task_chain, teacher_school_id
from schoolapp.access.identity import Caller, StudentCaller, TeacherCaller
from schoolapp.access.policy import Operation, authorize, enforce, require_grant
from schoolapp.core.exceptions import InvalidArgumentError
from schoolapp.core.models import SchoolClass, StudentProfile, SubjectAssignment, Task, TeacherProfile
from schoolapp.core.services import get_or_404

from .schemas import TaskCreate, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)


def _assigner_id(caller: Caller, requested: Optional[int]) -> Optional[int]:
    if isinstance(caller, TeacherCaller):
        if requested is not None and requested != caller.teacher_profile_id:
            raise InvalidArgumentError("Teachers can only create tasks assigned by themselves")
        return caller.teacher_profile_id
    return requested


async def create_task(db: AsyncSession, caller: Caller, payload: TaskCreate) -> TaskResponse:
    student = await get_or_404(db, StudentProfile, payload.student_id, "Student") if payload.student_id is not None else None
    school_class = await get_or_404(db, SchoolClass, payload.class_id, "Class") if payload.class_id is not None else None
    assignment = None
    if payload.subject_assignment_id is not None:
        assignment = await get_or_404(db, SubjectAssignment, payload.subject_assignment_id, "Subject assignment")
    if payload.teacher_id is not None:
        await get_or_404(db, TeacherProfile, payload.teacher_id, "Teacher")

    teacher_id = _assigner_id(caller, payload.teacher_id)
    chain = await resolve_task_chain(
        db,
        teacher_id=teacher_id,
        student_id=payload.student_id,
        class_id=payload.class_id,
        assignment_id=payload.subject_assignment_id,
    )
    enforce(Operation.CREATE_TASK, caller, chain)
    if teacher_id is None:
        raise InvalidArgumentError("teacher_id is required when an administrator creates a task")
    guard.ensure_task_targets(student, school_class, assignment, chain.school_id, await teacher_school_id(db, teacher_id))

    task = Task(
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        status=payload.status.value,
        priority=payload.priority.value if payload.priority else None,
        task_type=payload.task_type.value,
        teacher_id=teacher_id,
        student_id=payload.student_id,
        class_id=payload.class_id,
        subject_assignment_id=payload.subject_assignment_id,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Task %s created by user %s (assigner %s)", task.id, caller.user_id, teacher_id)
    return TaskResponse.model_validate(task)


async def get_task(db: AsyncSession, caller: Caller, task_id: int) -> TaskResponse:
    task = await get_or_404(db, Task, task_id, "Task")
    enforce(Operation.VIEW_TASK, caller, await resolve_existing_task_chain(db, task))
    return TaskResponse.model_validate(task)


async def _default_scope(db: AsyncSession, caller: Caller):
    if isinstance(caller, TeacherCaller):
        return Task.teacher_id == caller.teacher_profile_id
    if isinstance(caller, StudentCaller):
        student = await db.get(StudentProfile, caller.student_profile_id)
        return or_(
            Task.student_id == student.id,
            and_(Task.student_id.is_(None), Task.class_id == student.class_id),
        )
    return None


async def list_tasks(
    db: AsyncSession,
    caller: Caller,
    *,
    student_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    class_id: Optional[int] = None,
) -> List[TaskResponse]:
    """Tasks matching every given filter, limited to those the caller may view.

    Without filters a teacher sees the tasks they assigned and a student sees
    their own tasks plus class-wide tasks of their class.
    """
    if student_id is not None:
        await get_or_404(db, StudentProfile, student_id, "Student")
    if teacher_id is not None:
        await get_or_404(db, TeacherProfile, teacher_id, "Teacher")
    if class_id is not None:
        await get_or_404(db, SchoolClass, class_id, "Class")
    require_grant(Operation.VIEW_TASK, caller)

    stmt = select(Task)
    if student_id is not None:
        stmt = stmt.where(Task.student_id == student_id)
    if teacher_id is not None:
        stmt = stmt.where(Task.teacher_id == teacher_id)
    if class_id is not None:
        stmt = stmt.where(Task.class_id == class_id)
    if student_id is None and teacher_id is None and class_id is None:
        scope = await _default_scope(db, caller)
        if scope is not None:
            stmt = stmt.where(scope)
    result = await db.execute(stmt.order_by(Task.due_date, Task.id))

    visible = []
    for task in result.scalars().all():
        if authorize(Operation.VIEW_TASK, caller, await resolve_existing_task_chain(db, task)).allowed:
            visible.append(TaskResponse.model_validate(task))
    return visible


async def update_task(db: AsyncSession, caller: Caller, task_id: int, payload: TaskUpdate) -> TaskResponse:
    task = await get_or_404(db, Task, task_id, "Task")
    enforce(Operation.UPDATE_TASK, caller, await resolve_existing_task_chain(db, task))
    changes = payload.model_dump(exclude_unset=True)
    if isinstance(caller, StudentCaller):
        guard.ensure_status_only(changes.keys())
    for field, value in changes.items():
        if value is None and field in ("title", "due_date", "status"):
            raise InvalidArgumentError(f"{field} cannot be cleared")
        setattr(task, field, value.value if isinstance(value, Enum) else value)
    await db.commit()
    await db.refresh(task)
    logger.info("Task %s updated by user %s: %s", task.id, caller.user_id, ", ".join(sorted(changes)) or "no changes")
    return TaskResponse.model_validate(task)


async def delete_task(db: AsyncSession, caller: Caller, task_id: int) -> None:
    task = await get_or_404(db, Task, task_id, "Task")
    enforce(Operation.DELETE_TASK, caller, await resolve_existing_task_chain(db, task))
    await db.delete(task)
    await db.commit()
    logger.info("Task %s deleted by user %s", task_id, caller.user_id)
