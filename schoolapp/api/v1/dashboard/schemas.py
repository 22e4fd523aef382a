from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from schoolapp.core.enums import TaskStatus


class TaskSummary(BaseModel):
    id: int
    title: str
    due_date: datetime
    subject_name: str
    status: TaskStatus


class PerformanceItem(BaseModel):
    subject_name: str
    average_percentage: Decimal
    period_description: str = "Overall"


class StudentDashboardResponse(BaseModel):
    pending_tasks_count: int
    recent_pending_tasks: List[TaskSummary]
    performance_summary: List[PerformanceItem]
