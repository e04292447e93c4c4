# myos/schemas/journal.py
from pydantic import BaseModel, Field
from typing import Optional

from myos.schemas.common import RecordBase, LabelledInput


class JournalEntry(RecordBase):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    title: Optional[str] = ""
    body: Optional[str] = ""


class JournalEntryCreate(LabelledInput):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    title: str = ""
    body: str = ""


class JournalEntryUpdate(LabelledInput):
    title: Optional[str] = None
    body: Optional[str] = None


class JournalSave(BaseModel):
    """Editor save for a given day: creates the entry or updates it in place."""
    date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    title: str = ""
    body: str = ""
