from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from schoolapp.core.enums import AttendanceStatus


class AttendanceRecordItem(BaseModel):
    student_id: int = Field(..., description="student_profiles.id")
    status: AttendanceStatus
    remarks: Optional[str] = None


class RecordAttendanceRequest(BaseModel):
    class_id: int
    attendance_date: date
    records: List[AttendanceRecordItem] = Field(..., min_length=1)


class AttendanceResponse(BaseModel):
    id: int
    student_id: int
    class_id: int
    attendance_date: date
    status: AttendanceStatus
    remarks: Optional[str] = None
    recorded_by_teacher_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
