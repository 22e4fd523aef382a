"""Decision table for every access-controlled operation.

Rows are keyed by (operation, role). Each cell is a tuple of clauses evaluated
as a logical OR: the first clause that holds allows the call. An empty or
missing cell denies. A principal without a school is denied before any row is
consulted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

from schoolapp.access.chain import Chain
from schoolapp.access.identity import Caller, PrincipalCaller, StudentCaller, TeacherCaller
from schoolapp.core.enums import UserRole
from schoolapp.core.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    MANAGE_SCHOOL = "manage_school"
    VIEW_SCHOOL = "view_school"
    MANAGE_CLASS = "manage_class"
    VIEW_CLASS = "view_class"
    MANAGE_SUBJECT = "manage_subject"
    CREATE_PRINCIPAL = "create_principal"
    CREATE_SCHOOL_MEMBER = "create_school_member"
    VIEW_STUDENT = "view_student"
    MANAGE_STUDENT = "manage_student"
    CREATE_SUBJECT_ASSIGNMENT = "create_subject_assignment"
    UPDATE_SUBJECT_ASSIGNMENT = "update_subject_assignment"
    DELETE_SUBJECT_ASSIGNMENT = "delete_subject_assignment"
    VIEW_SUBJECT_ASSIGNMENT = "view_subject_assignment"
    RECORD_ATTENDANCE = "record_attendance"
    VIEW_ATTENDANCE = "view_attendance"
    ENTER_MARK = "enter_mark"
    UPDATE_MARK = "update_mark"
    DELETE_MARK = "delete_mark"
    VIEW_MARK = "view_mark"
    SUBMIT_FEEDBACK = "submit_feedback"
    MARK_FEEDBACK_READ = "mark_feedback_read"
    VIEW_FEEDBACK = "view_feedback"
    LIST_CLASS_TEACHER_FEEDBACK = "list_class_teacher_feedback"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    DELETE_TASK = "delete_task"
    VIEW_TASK = "view_task"
    VIEW_DASHBOARD = "view_dashboard"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    @classmethod
    def allow(cls, reason: str) -> "Decision":
        return cls(True, reason)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)


@dataclass(frozen=True)
class Clause:
    name: str
    test: Callable[[Caller, Chain], bool]


# ----- Clauses -----
def _anyone(caller: Caller, chain: Chain) -> bool:
    return True


def _same_school(caller: Caller, chain: Chain) -> bool:
    return chain.school_id is not None and chain.school_id == caller.school_id


def _is_class_teacher(caller: Caller, chain: Chain) -> bool:
    return chain.class_teacher_user_id is not None and chain.class_teacher_user_id == caller.user_id


def _has_active_assignment(caller: Caller, chain: Chain) -> bool:
    return isinstance(caller, TeacherCaller) and caller.teacher_profile_id in chain.active_teacher_profile_ids


def _is_assignment_teacher(caller: Caller, chain: Chain) -> bool:
    return (
        isinstance(caller, TeacherCaller)
        and chain.assignment_teacher_profile_id is not None
        and chain.assignment_teacher_profile_id == caller.teacher_profile_id
    )


def _is_recorder(caller: Caller, chain: Chain) -> bool:
    return (
        isinstance(caller, TeacherCaller)
        and chain.recorded_by_teacher_id is not None
        and chain.recorded_by_teacher_id == caller.teacher_profile_id
    )


def _is_task_assigner(caller: Caller, chain: Chain) -> bool:
    return (
        isinstance(caller, TeacherCaller)
        and chain.task_teacher_id is not None
        and chain.task_teacher_id == caller.teacher_profile_id
    )


def _is_own_student_record(caller: Caller, chain: Chain) -> bool:
    return (
        isinstance(caller, StudentCaller)
        and chain.student_id is not None
        and chain.student_id == caller.student_profile_id
    )


def _is_enrolled_in_class_task(caller: Caller, chain: Chain) -> bool:
    # Class-wide task (no individual student) in the caller's own class.
    return (
        isinstance(caller, StudentCaller)
        and chain.student_id is None
        and caller.student_profile_id in chain.enrolled_student_ids
    )


def _teaches_enrolled_student(caller: Caller, chain: Chain) -> bool:
    """Assignment teacher, and the named student sits in the assignment's class."""
    return (
        _is_assignment_teacher(caller, chain)
        and chain.student_id is not None
        and chain.assignment_class_id is not None
        and chain.class_id == chain.assignment_class_id
        and chain.student_id in chain.enrolled_student_ids
    )


ANYONE = Clause("role grant", _anyone)
SAME_SCHOOL = Clause("same school", _same_school)
CLASS_TEACHER = Clause("class teacher", _is_class_teacher)
ACTIVE_TEACHER = Clause("active subject teacher in class", _has_active_assignment)
ASSIGNMENT_TEACHER = Clause("teacher on subject assignment", _is_assignment_teacher)
RECORDER = Clause("original recorder", _is_recorder)
TASK_ASSIGNER = Clause("task assigner", _is_task_assigner)
OWN_RECORD = Clause("own student record", _is_own_student_record)
CLASS_TASK_MEMBER = Clause("member of task class", _is_enrolled_in_class_task)
TEACHES_STUDENT = Clause("teaches student on assignment", _teaches_enrolled_student)


Rules = Dict[UserRole, Tuple[Clause, ...]]

SA = UserRole.SUPER_ADMIN
ADMIN = UserRole.ADMIN
TEACHER = UserRole.TEACHER
STUDENT = UserRole.STUDENT

_school_admin: Rules = {SA: (ANYONE,), ADMIN: (SAME_SCHOOL,)}

POLICY: Dict[Operation, Rules] = {
    Operation.MANAGE_SCHOOL: {SA: (ANYONE,)},
    Operation.VIEW_SCHOOL: _school_admin,
    Operation.MANAGE_CLASS: _school_admin,
    Operation.VIEW_CLASS: {**_school_admin, TEACHER: (SAME_SCHOOL,)},
    # Subjects are global; an admin only needs to be bound to a school.
    Operation.MANAGE_SUBJECT: _school_admin,
    Operation.CREATE_PRINCIPAL: {SA: (ANYONE,)},
    # New user's school is forced to the principal's school by the service.
    Operation.CREATE_SCHOOL_MEMBER: {ADMIN: (SAME_SCHOOL,)},
    Operation.VIEW_STUDENT: {
        **_school_admin,
        TEACHER: (SAME_SCHOOL,),
        STUDENT: (OWN_RECORD,),
    },
    Operation.MANAGE_STUDENT: _school_admin,
    Operation.CREATE_SUBJECT_ASSIGNMENT: _school_admin,
    Operation.UPDATE_SUBJECT_ASSIGNMENT: _school_admin,
    Operation.DELETE_SUBJECT_ASSIGNMENT: _school_admin,
    Operation.VIEW_SUBJECT_ASSIGNMENT: {
        **_school_admin,
        TEACHER: (SAME_SCHOOL,),
        STUDENT: (SAME_SCHOOL,),
    },
    Operation.RECORD_ATTENDANCE: {**_school_admin, TEACHER: (CLASS_TEACHER,)},
    Operation.VIEW_ATTENDANCE: {
        **_school_admin,
        TEACHER: (CLASS_TEACHER, ACTIVE_TEACHER, RECORDER),
        STUDENT: (OWN_RECORD,),
    },
    Operation.ENTER_MARK: {**_school_admin, TEACHER: (CLASS_TEACHER, ASSIGNMENT_TEACHER)},
    Operation.UPDATE_MARK: {**_school_admin, TEACHER: (CLASS_TEACHER, ASSIGNMENT_TEACHER, RECORDER)},
    Operation.DELETE_MARK: {**_school_admin, TEACHER: (CLASS_TEACHER, ASSIGNMENT_TEACHER, RECORDER)},
    Operation.VIEW_MARK: {
        **_school_admin,
        TEACHER: (CLASS_TEACHER, ASSIGNMENT_TEACHER, ACTIVE_TEACHER),
        STUDENT: (OWN_RECORD,),
    },
    Operation.SUBMIT_FEEDBACK: {TEACHER: (TEACHES_STUDENT,)},
    Operation.MARK_FEEDBACK_READ: {TEACHER: (CLASS_TEACHER,)},
    Operation.VIEW_FEEDBACK: {
        **_school_admin,
        TEACHER: (CLASS_TEACHER, ASSIGNMENT_TEACHER),
        STUDENT: (OWN_RECORD,),
    },
    Operation.LIST_CLASS_TEACHER_FEEDBACK: {TEACHER: (ANYONE,)},
    Operation.CREATE_TASK: {**_school_admin, TEACHER: (TASK_ASSIGNER,)},
    Operation.UPDATE_TASK: {**_school_admin, TEACHER: (TASK_ASSIGNER,), STUDENT: (OWN_RECORD,)},
    Operation.DELETE_TASK: {**_school_admin, TEACHER: (TASK_ASSIGNER,)},
    Operation.VIEW_TASK: {
        **_school_admin,
        TEACHER: (TASK_ASSIGNER, ACTIVE_TEACHER),
        STUDENT: (OWN_RECORD, CLASS_TASK_MEMBER),
    },
    Operation.VIEW_DASHBOARD: {STUDENT: (ANYONE,)},
}


def authorize(operation: Operation, caller: Caller, chain: Chain) -> Decision:
    """Pure decision for one call. Never touches the database."""
    if isinstance(caller, PrincipalCaller) and caller.school_id is None:
        return Decision.deny("principal is not associated with a school")
    clauses = POLICY.get(operation, {}).get(caller.role, ())
    if not clauses:
        return Decision.deny(f"role {caller.role.value} has no grant for {operation.value}")
    for clause in clauses:
        if clause.test(caller, chain):
            return Decision.allow(clause.name)
    names = ", ".join(c.name for c in clauses)
    return Decision.deny(f"none of [{names}] holds for {caller.role.value}")


def enforce(operation: Operation, caller: Caller, chain: Chain) -> None:
    """Raise ForbiddenError unless the caller may perform the operation on the chain."""
    decision = authorize(operation, caller, chain)
    if decision.allowed:
        return
    logger.info(
        "Denied %s for user %s (%s): %s",
        operation.value,
        caller.user_id,
        caller.role.value,
        decision.reason,
    )
    raise ForbiddenError(f"You are not allowed to {operation.value.replace('_', ' ')}")


def require_role(operation: Operation, caller: Caller) -> None:
    """Role-only gate for operations without a target record (e.g. scoped listings)."""
    enforce(operation, caller, Chain(school_id=caller.school_id))


def require_grant(operation: Operation, caller: Caller) -> None:
    """Deny roles with no row at all for the operation; per-record checks come later."""
    if isinstance(caller, PrincipalCaller) and caller.school_id is None:
        enforce(operation, caller, Chain())
    if not POLICY.get(operation, {}).get(caller.role):
        enforce(operation, caller, Chain())
