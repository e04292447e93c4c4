# myos/schemas/prayer.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional

from myos.schemas.common import RecordBase, LabelledInput


class Prayer(RecordBase):
    title: str = Field(..., min_length=1, max_length=200)
    text: Optional[str] = None


class PrayerCreate(LabelledInput):
    title: str = Field(..., min_length=1, max_length=200)
    text: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Prayer title is required")
        return v


class PrayerUpdate(LabelledInput):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    text: Optional[str] = None


class PrayerLog(RecordBase):
    prayer_id: str = Field(..., min_length=1)
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    count: int = Field(1, ge=1)


class PrayerLogIncrement(BaseModel):
    date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")


class PrayerDay(BaseModel):
    prayer: Dict[str, Any]
    count: int = 0
