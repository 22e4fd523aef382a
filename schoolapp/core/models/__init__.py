from schoolapp.core.models.school import School
from schoolapp.core.models.class_model import SchoolClass
from schoolapp.core.models.subject import Subject
from schoolapp.core.models.teacher_profile import TeacherProfile, TeacherSubject
from schoolapp.core.models.student_profile import StudentProfile
from schoolapp.core.models.subject_assignment import SubjectAssignment
from schoolapp.core.models.attendance import Attendance
from schoolapp.core.models.mark import Mark
from schoolapp.core.models.feedback import Feedback
from schoolapp.core.models.task import Task

__all__ = [
    "Attendance",
    "Feedback",
    "Mark",
    "School",
    "SchoolClass",
    "StudentProfile",
    "Subject",
    "SubjectAssignment",
    "Task",
    "TeacherProfile",
    "TeacherSubject",
]
