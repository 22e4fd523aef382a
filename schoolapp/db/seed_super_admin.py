"""
Seed script to create the tables and the first SUPER_ADMIN user.

Run once with env set:
  SUPER_ADMIN_EMAIL=admin@yourschool.org
  SUPER_ADMIN_PASSWORD=YourSecurePassword

Creates:
- every table declared on Base (if missing)
- users: one user with role SUPER_ADMIN and no school (if email/password set)
"""
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import schoolapp.core.models  # noqa: F401  (register tables on Base)
from schoolapp.auth.models import User
from schoolapp.auth.security import hash_password
from schoolapp.core.config import settings
from schoolapp.core.enums import UserRole
from schoolapp.db.session import AsyncSessionLocal, Base, engine


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Tables ensured.")


async def seed_super_admin(db: AsyncSession) -> None:
    email = settings.super_admin_email
    password = settings.super_admin_password
    if not email or not password:
        print("No SUPER_ADMIN_EMAIL/SUPER_ADMIN_PASSWORD; skipping super admin user.")
        return

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user:
        db.add(
            User(
                email=email,
                password_hash=hash_password(password),
                first_name="Super",
                last_name="Admin",
                role=UserRole.SUPER_ADMIN.value,
                school_id=None,
                enabled=True,
            )
        )
        print("Created SUPER_ADMIN user:", email)
    else:
        user.role = UserRole.SUPER_ADMIN.value
        user.school_id = None
        user.enabled = True
        user.password_hash = hash_password(password)
        print("Updated existing user to SUPER_ADMIN:", email)

    await db.commit()
    print("Super admin seed done.")


async def main() -> None:
    await create_tables()
    async with AsyncSessionLocal() as db:
        try:
            await seed_super_admin(db)
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise


if __name__ == "__main__":
    asyncio.run(main())
