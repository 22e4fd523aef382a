"""Subject assignment: the only link granting a teacher subject-teaching rights over a class."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from schoolapp.core.enums import AssignmentStatus
from schoolapp.db.session import Base


class SubjectAssignment(Base):
    __tablename__ = "subject_assignments"
    __table_args__ = (
        UniqueConstraint(
            "class_id", "subject_id", "teacher_id", "academic_year", "term",
            name="uq_subject_assignment",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    # teacher_profiles.id, not users.id
    teacher_id = Column(Integer, ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    academic_year = Column(String(50), nullable=False)
    term = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default=AssignmentStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
