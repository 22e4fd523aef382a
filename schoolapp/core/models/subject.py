from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from schoolapp.db.session import Base


class Subject(Base):
    """Subject catalog shared by all schools (e.g. MATH-101)."""

    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    subject_code = Column(String(50), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
