# myos/schemas/label.py
from pydantic import BaseModel, Field, field_validator

from myos.schemas.common import RecordBase


class Label(RecordBase):
    """Label registry entry; the name doubles as the id."""
    name: str = Field(..., min_length=1, max_length=100)


class LabelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Label name is required")
        return v
