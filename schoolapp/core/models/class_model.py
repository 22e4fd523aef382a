"""School classes. Model named SchoolClass to avoid Python 'class' keyword."""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from schoolapp.db.session import Base


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    school_id = Column(Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    # Designated class-teacher (users.id, role TEACHER, same school). Distinct from subject teachers.
    class_teacher_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
