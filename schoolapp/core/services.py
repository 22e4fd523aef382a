"""Shared lookups used by the service modules."""

from typing import Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.core.exceptions import DuplicateError, NotFoundError

ModelT = TypeVar("ModelT")


async def get_or_404(db: AsyncSession, model: Type[ModelT], obj_id: Optional[int], label: str) -> ModelT:
    """Existence check. Always runs before any permission check on the same record."""
    obj = await db.get(model, obj_id) if obj_id is not None else None
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


async def commit_or_conflict(db: AsyncSession, message: str) -> None:
    """Commit the unit of work; a unique-constraint race becomes a DuplicateError."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateError(message)
