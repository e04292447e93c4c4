# myos/schemas/habit.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional
from enum import Enum

from myos.schemas.common import RecordBase, LabelledInput, normalize_timestamp


class HabitLogStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"
    NA = "NA"


class Habit(RecordBase):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    archived_at: Optional[str] = None

    @field_validator("archived_at", mode="before")
    @classmethod
    def _archived_at(cls, v):
        return normalize_timestamp(v)


class HabitCreate(LabelledInput):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Habit title is required")
        return v


class HabitUpdate(LabelledInput):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class HabitLog(RecordBase):
    habit_id: str = Field(..., min_length=1)
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    status: HabitLogStatus


class HabitLogSet(BaseModel):
    """Set (or clear, with ``status=None``) a habit's outcome for one day."""
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    status: Optional[HabitLogStatus] = None


class HabitDay(BaseModel):
    habit: Dict[str, Any]
    status: Optional[HabitLogStatus] = None
