# myos/schemas/checkin.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime

from myos.schemas.common import RecordBase, LabelledInput, normalize_timestamp
from myos.services.status_engine import DurationUnit


class Checkin(RecordBase):
    """
    A recurring check-in as stored and replicated.

    Frequency and thresholds may be missing on records written by other
    clients. The status engine supplies the fallbacks, so they stay optional
    here and an edit never writes a create-time default into them.
    """
    title: str = Field(..., min_length=1, max_length=200)
    frequency_value: Optional[int] = None
    frequency_unit: Optional[str] = None
    yellow_value: Optional[int] = None
    yellow_unit: Optional[str] = None
    red_value: Optional[int] = None
    red_unit: Optional[str] = None
    first_due_at: Optional[str] = None
    last_checkin_at: Optional[str] = None

    @field_validator("first_due_at", "last_checkin_at", mode="before")
    @classmethod
    def _timestamps(cls, v):
        return normalize_timestamp(v)


class CheckinCreate(LabelledInput):
    title: str = Field(..., min_length=1, max_length=200)
    frequency_value: int = Field(1, ge=1, description="Nominal interval between occurrences")
    frequency_unit: DurationUnit = DurationUnit.WEEK
    yellow_value: int = Field(1, ge=0, description="Offset past due before turning yellow")
    yellow_unit: DurationUnit = DurationUnit.DAY
    red_value: int = Field(3, ge=0, description="Offset past due before turning red")
    red_unit: DurationUnit = DurationUnit.DAY
    first_due_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Title required")
        return v


class CheckinUpdate(LabelledInput):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    frequency_value: Optional[int] = Field(None, ge=1)
    frequency_unit: Optional[DurationUnit] = None
    yellow_value: Optional[int] = Field(None, ge=0)
    yellow_unit: Optional[DurationUnit] = None
    red_value: Optional[int] = Field(None, ge=0)
    red_unit: Optional[DurationUnit] = None
    first_due_at: Optional[datetime] = None


class CheckinWithStatus(BaseModel):
    """A live check-in together with its derived state."""
    checkin: Dict[str, Any]
    severity: str
    due_at: str
    yellow_at: str
    red_at: str
    days_since_anchor: int
