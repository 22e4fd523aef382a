from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text

from schoolapp.db.session import Base


class Feedback(Base):
    """Subject teacher's note about a student, read by the class-teacher."""

    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_assignment_id = Column(
        Integer, ForeignKey("subject_assignments.id", ondelete="CASCADE"), nullable=False
    )
    feedback_text = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    submission_date = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
