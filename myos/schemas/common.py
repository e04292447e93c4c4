# myos/schemas/common.py
"""Common schemas and validation helpers shared by every record collection."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict, List, Optional, Type, TypeVar
from datetime import datetime

from myos.core.exceptions import ValidationError
from myos.core.timestamps import parse_timestamp, to_iso

M = TypeVar("M", bound=BaseModel)


def normalize_labels(value: Any) -> List[str]:
    """Labels behave as a set: strip, drop empties and duplicates, keep first-seen order."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    seen: List[str] = []
    for label in value:
        name = str(label).strip()
        if name and name not in seen:
            seen.append(name)
    return seen


def normalize_timestamp(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (str, datetime)):
        try:
            return to_iso(parse_timestamp(value))
        except ValueError:
            raise ValueError(f"Invalid ISO-8601 timestamp: {value}")
    raise ValueError(f"Invalid timestamp: {value!r}")


def validate_model(model: Type[M], data: Any) -> M:
    """
    Validate ``data`` against ``model`` at a domain-operation boundary.

    Pydantic errors are converted into the application's ValidationError so
    callers handle a single error type.
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"{field}: {first.get('msg')}" if field else first.get("msg", str(e)), field=field)


class RecordBase(BaseModel):
    """
    Shape shared by every syncable record.

    Unknown fields are preserved so a record fetched from the remote backend
    round-trips without loss.
    """
    model_config = ConfigDict(extra="allow", use_enum_values=True)

    id: str = Field(..., min_length=1)
    created_at: str
    updated_at: str
    deleted_at: Optional[str] = None
    labels: List[str] = Field(default_factory=list)

    @field_validator("labels", mode="before")
    @classmethod
    def _labels(cls, v):
        return normalize_labels(v)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _required_timestamps(cls, v):
        normalized = normalize_timestamp(v)
        if normalized is None:
            raise ValueError("Timestamp is required")
        return normalized

    @field_validator("deleted_at", mode="before")
    @classmethod
    def _deleted_at(cls, v):
        return normalize_timestamp(v)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class LabelledInput(BaseModel):
    """Mixin for create/update payloads that carry labels."""
    labels: Optional[List[str]] = None

    @field_validator("labels", mode="before")
    @classmethod
    def _labels(cls, v):
        return None if v is None else normalize_labels(v)


class MessageResponse(BaseModel):
    message: str
