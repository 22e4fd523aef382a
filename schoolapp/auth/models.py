from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from schoolapp.db.session import Base


class User(Base):
    """Login identity. Role decides which profile (teacher/student) belongs to it."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    phone_number = Column(String(20), nullable=True)
    # SUPER_ADMIN, ADMIN (principal), TEACHER, STUDENT, PARENT
    role = Column(String(20), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    # School membership; null only for SUPER_ADMIN. Plain column, not a FK: schools.principal_id points back here.
    school_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
