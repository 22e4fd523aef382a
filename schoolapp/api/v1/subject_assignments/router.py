from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

from . import service
from .schemas import (
    SubjectAssignmentCreate,
    SubjectAssignmentResponse,
    SubjectAssignmentStatusUpdate,
    SubjectAssignmentUpdate,
)

router = APIRouter(prefix="/api/v1/subject-assignments", tags=["subject-assignments"])


@router.post("", response_model=SubjectAssignmentResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    payload: SubjectAssignmentCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.create_assignment(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}", response_model=List[SubjectAssignmentResponse])
async def list_by_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_class(db, caller, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/teacher/{teacher_id}", response_model=List[SubjectAssignmentResponse])
async def list_by_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_teacher(db, caller, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/subject/{subject_id}", response_model=List[SubjectAssignmentResponse])
async def list_by_subject(
    subject_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_subject(db, caller, subject_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{assignment_id}", response_model=SubjectAssignmentResponse)
async def get_assignment(
    assignment_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.get_assignment(db, caller, assignment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{assignment_id}", response_model=SubjectAssignmentResponse)
async def update_assignment(
    assignment_id: int,
    payload: SubjectAssignmentUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.update_assignment(db, caller, assignment_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{assignment_id}/status", response_model=SubjectAssignmentResponse)
async def update_assignment_status(
    assignment_id: int,
    payload: SubjectAssignmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.update_assignment(
            db, caller, assignment_id, SubjectAssignmentUpdate(status=payload.status)
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        await service.delete_assignment(db, caller, assignment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
