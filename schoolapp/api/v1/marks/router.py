from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

from . import service
from .schemas import MarkRequest, MarkResponse

router = APIRouter(prefix="/api/v1/marks", tags=["marks"])


@router.post("", response_model=MarkResponse, status_code=status.HTTP_201_CREATED)
async def enter_mark(
    payload: MarkRequest,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.enter_mark(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/profile/{student_id}", response_model=List[MarkResponse])
async def list_by_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_student(db, caller, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/user/{user_id}", response_model=List[MarkResponse])
async def list_by_student_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_student_user(db, caller, user_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/subject-assignment/{assignment_id}", response_model=List[MarkResponse])
async def list_by_assignment(
    assignment_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_assignment(db, caller, assignment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{mark_id}", response_model=MarkResponse)
async def get_mark(
    mark_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.get_mark(db, caller, mark_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{mark_id}", response_model=MarkResponse)
async def update_mark(
    mark_id: int,
    payload: MarkRequest,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.update_mark(db, caller, mark_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{mark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_mark(
    mark_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        await service.delete_mark(db, caller, mark_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
