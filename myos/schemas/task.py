# myos/schemas/task.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime
from enum import Enum

from myos.schemas.common import RecordBase, LabelledInput, normalize_timestamp


class TaskStatus(str, Enum):
    OPEN = "OPEN"
    DONE = "DONE"


class Task(RecordBase):
    title: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = None
    status: TaskStatus = TaskStatus.OPEN
    due_at: Optional[str] = None
    completed_at: Optional[str] = None

    @field_validator("due_at", "completed_at", mode="before")
    @classmethod
    def _timestamps(cls, v):
        return normalize_timestamp(v)


class TaskCreate(LabelledInput):
    title: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = None
    due_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Title required")
        return v


class TaskUpdate(LabelledInput):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    notes: Optional[str] = None
    due_at: Optional[datetime] = None


class TaskSummary(BaseModel):
    """Open/done task with its derived age and overdue flag."""
    task: Dict[str, Any]
    days_open: int
    is_overdue: bool
