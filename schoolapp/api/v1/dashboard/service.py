from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.access.policy import Operation, require_grant
from schoolapp.core.enums import TaskStatus
from schoolapp.core.models import Mark, SchoolClass, StudentProfile, Subject, SubjectAssignment, Task

from .schemas import PerformanceItem, StudentDashboardResponse, TaskSummary

RECENT_TASKS_LIMIT = 5


async def _subject_name_for_task(db: AsyncSession, task: Task) -> str:
    if task.subject_assignment_id is not None:
        assignment = await db.get(SubjectAssignment, task.subject_assignment_id)
        subject = await db.get(Subject, assignment.subject_id) if assignment else None
        if subject is not None:
            return subject.name
    if task.class_id is not None:
        school_class = await db.get(SchoolClass, task.class_id)
        if school_class is not None:
            return f"Class Task ({school_class.name})"
    return "General Task"


def _percentage(obtained: Decimal, total: Decimal) -> Decimal:
    if total <= 0:
        return Decimal("0.00")
    return (obtained * 100 / total).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


async def get_student_dashboard(db: AsyncSession, caller: Caller) -> StudentDashboardResponse:
    """Pending tasks and per-subject averages for the calling student."""
    require_grant(Operation.VIEW_DASHBOARD, caller)
    student = await db.get(StudentProfile, caller.student_profile_id)

    result = await db.execute(
        select(Task)
        .where(Task.student_id == student.id, Task.status != TaskStatus.COMPLETED.value)
        .order_by(Task.due_date, Task.id)
    )
    pending = list(result.scalars().all())
    recent = [
        TaskSummary(
            id=task.id,
            title=task.title,
            due_date=task.due_date,
            subject_name=await _subject_name_for_task(db, task),
            status=task.status,
        )
        for task in pending[:RECENT_TASKS_LIMIT]
    ]

    result = await db.execute(
        select(Subject.name, Mark.marks_obtained, Mark.total_marks)
        .join(SubjectAssignment, SubjectAssignment.id == Mark.subject_assignment_id)
        .join(Subject, Subject.id == SubjectAssignment.subject_id)
        .where(Mark.student_id == student.id)
    )
    totals: Dict[str, Tuple[Decimal, Decimal]] = defaultdict(lambda: (Decimal(0), Decimal(0)))
    for subject_name, obtained, total in result.all():
        acc_obtained, acc_total = totals[subject_name]
        totals[subject_name] = (acc_obtained + Decimal(str(obtained)), acc_total + Decimal(str(total)))
    performance: List[PerformanceItem] = [
        PerformanceItem(subject_name=name, average_percentage=_percentage(obtained, total))
        for name, (obtained, total) in sorted(totals.items())
    ]

    return StudentDashboardResponse(
        pending_tasks_count=len(pending),
        recent_pending_tasks=recent,
        performance_summary=performance,
    )
