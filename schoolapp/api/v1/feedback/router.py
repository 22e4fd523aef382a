from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

from . import service
from .schemas import FeedbackCreate, FeedbackResponse

router = APIRouter(prefix="/api/v1/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    payload: FeedbackCreate,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.submit_feedback(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class-teacher/me", response_model=List[FeedbackResponse])
async def list_for_class_teacher(
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_for_class_teacher(db, caller)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class-teacher/me/unread", response_model=List[FeedbackResponse])
async def list_unread_for_class_teacher(
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_for_class_teacher(db, caller, unread_only=True)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/{student_id}", response_model=List[FeedbackResponse])
async def list_by_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_student(db, caller, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{feedback_id}", response_model=FeedbackResponse)
async def get_feedback(
    feedback_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.get_feedback(db, caller, feedback_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{feedback_id}/read", response_model=FeedbackResponse)
async def mark_read(
    feedback_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.mark_read(db, caller, feedback_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
