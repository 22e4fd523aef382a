from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

from . import service
from .schemas import AttendanceResponse, RecordAttendanceRequest

router = APIRouter(prefix="/api/v1/attendance", tags=["attendance"])


@router.post("/record", response_model=List[AttendanceResponse], status_code=status.HTTP_201_CREATED)
async def record_attendance(
    payload: RecordAttendanceRequest,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.record_attendance(db, caller, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/{student_id}/date/{att_date}", response_model=AttendanceResponse)
async def get_by_student_and_date(
    student_id: int,
    att_date: date,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.get_by_student_and_date(db, caller, student_id, att_date)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class/{class_id}/date/{att_date}", response_model=List[AttendanceResponse])
async def list_by_class_and_date(
    class_id: int,
    att_date: date,
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_class_and_date(db, caller, class_id, att_date)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student/{student_id}/period", response_model=List[AttendanceResponse])
async def list_by_student_and_period(
    student_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.list_by_student_and_period(db, caller, student_id, start_date, end_date)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
