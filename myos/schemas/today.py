# myos/schemas/today.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from myos.schemas.checkin import CheckinWithStatus
from myos.schemas.habit import HabitDay
from myos.schemas.prayer import PrayerDay
from myos.schemas.sync import SyncStatusResponse
from myos.schemas.task import TaskSummary


class TodayResponse(BaseModel):
    """Dashboard for the current local day."""
    date: str
    urgent_checkins: List[CheckinWithStatus] = Field(default_factory=list)
    open_tasks: List[TaskSummary] = Field(default_factory=list)
    open_task_count: int = 0
    habits: List[HabitDay] = Field(default_factory=list)
    prayers: List[PrayerDay] = Field(default_factory=list)
    journal_entry: Optional[Dict[str, Any]] = None
    sync: Optional[SyncStatusResponse] = None
