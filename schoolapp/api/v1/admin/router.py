from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.api.v1.students.schemas import StudentResponse
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

from . import service
from .schemas import (
    ParentCreate,
    PrincipalCreate,
    StudentCreate,
    TeacherCreate,
    TeacherResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.post("/principals", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_principal(
    payload: PrincipalCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    """Super admin only. The new principal becomes the school's principal."""
    try:
        return await service.create_principal(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/teachers", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.create_teacher(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.create_student(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/parents", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_parent(
    payload: ParentCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.create_parent(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
