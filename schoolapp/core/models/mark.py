from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text

from schoolapp.db.session import Base


class Mark(Base):
    """Assessment result. The student must belong to the subject assignment's class."""

    __tablename__ = "marks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_assignment_id = Column(
        Integer, ForeignKey("subject_assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    assessment_name = Column(String(255), nullable=False)
    marks_obtained = Column(Numeric(5, 2), nullable=False)
    total_marks = Column(Numeric(5, 2), nullable=False)
    grade = Column(String(10), nullable=True)
    exam_date = Column(Date, nullable=True)
    comments = Column(Text, nullable=True)
    recorded_by_teacher_id = Column(Integer, ForeignKey("teacher_profiles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
