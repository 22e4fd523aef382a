import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from typing import AsyncGenerator, Callable, Dict, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import schoolapp.core.models  # noqa: E402,F401
from schoolapp.auth.models import User  # noqa: E402
from schoolapp.auth.security import create_access_token, hash_password  # noqa: E402
from schoolapp.core.enums import AssignmentStatus, UserRole  # noqa: E402
from schoolapp.core.models import (  # noqa: E402
    School,
    SchoolClass,
    StudentProfile,
    Subject,
    SubjectAssignment,
    TeacherProfile,
)
from schoolapp.db.session import Base, get_db  # noqa: E402
from schoolapp.main import app  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "secret123"
# Hashed once; bcrypt is deliberately slow.
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test, shared by the session and the app."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        # SQLite leaves FK enforcement off unless asked, unlike postgres.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class Factory:
    """Builds persisted rows with sensible defaults."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def school(self, name: Optional[str] = None) -> School:
        return await self._save(School(name=name or f"School {self._next()}"))

    async def user(
        self,
        role: UserRole,
        school_id: Optional[int] = None,
        *,
        enabled: bool = True,
        email: Optional[str] = None,
    ) -> User:
        n = self._next()
        return await self._save(
            User(
                email=email or f"{role.value.lower()}{n}@school.edu",
                password_hash=PASSWORD_HASH,
                first_name=role.value.title(),
                last_name=str(n),
                role=role.value,
                school_id=school_id,
                enabled=enabled,
            )
        )

    async def super_admin(self) -> User:
        return await self.user(UserRole.SUPER_ADMIN)

    async def principal(self, school: Optional[School]) -> User:
        return await self.user(UserRole.ADMIN, school.id if school else None)

    async def teacher(self, school: School) -> Tuple[User, TeacherProfile]:
        user = await self.user(UserRole.TEACHER, school.id)
        profile = await self._save(TeacherProfile(user_id=user.id))
        return user, profile

    async def school_class(self, school: School, class_teacher: Optional[User] = None) -> SchoolClass:
        return await self._save(
            SchoolClass(
                name=f"Class {self._next()}",
                school_id=school.id,
                class_teacher_id=class_teacher.id if class_teacher else None,
            )
        )

    async def student(self, school_class: SchoolClass) -> Tuple[User, StudentProfile]:
        user = await self.user(UserRole.STUDENT, school_class.school_id)
        profile = await self._save(StudentProfile(user_id=user.id, class_id=school_class.id))
        return user, profile

    async def subject(self, name: Optional[str] = None) -> Subject:
        n = self._next()
        return await self._save(Subject(name=name or f"Subject {n}", subject_code=f"SUB{n}"))

    async def assignment(
        self,
        school_class: SchoolClass,
        teacher: TeacherProfile,
        subject: Optional[Subject] = None,
        status: AssignmentStatus = AssignmentStatus.ACTIVE,
    ) -> SubjectAssignment:
        subject = subject or await self.subject()
        return await self._save(
            SubjectAssignment(
                class_id=school_class.id,
                subject_id=subject.id,
                teacher_id=teacher.id,
                academic_year="2024-2025",
                term="Term 1",
                status=status.value,
            )
        )


@pytest.fixture()
def factory(db_session: AsyncSession) -> Factory:
    return Factory(db_session)


def _auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(subject={"sub": user.email, "user_id": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Bearer headers for a user, signed like a real login."""
    return _auth_headers


@pytest.fixture()
def password() -> str:
    return PASSWORD
