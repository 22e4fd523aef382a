from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

from . import service
from .schemas import AssignClassTeacherRequest, ClassCreate, ClassResponse, ClassUpdate

router = APIRouter(prefix="/api/v1/classes", tags=["classes"])


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.create_class(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ClassResponse])
async def list_classes(
    school_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_classes(db, caller, school_id=school_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.get_class(db, caller, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{class_id}", response_model=ClassResponse)
async def update_class(
    class_id: int,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.update_class(db, caller, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{class_id}/assign-teacher", response_model=ClassResponse)
async def assign_class_teacher(
    class_id: int,
    payload: AssignClassTeacherRequest,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.assign_class_teacher(db, caller, class_id, payload.teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        await service.delete_class(db, caller, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
