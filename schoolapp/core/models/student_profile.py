from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer

from schoolapp.db.session import Base


class StudentProfile(Base):
    """One-to-one extension of a STUDENT user. Class membership can be reassigned."""

    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
