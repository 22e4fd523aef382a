from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

from . import service
from .schemas import StudentDashboardResponse

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/student/summary", response_model=StudentDashboardResponse)
async def get_student_dashboard(
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    try:
        return await service.get_student_dashboard(db, caller)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
