# myos/schemas/action_log.py
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class ActionType(str, Enum):
    """Mutations recorded in the local action log."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    CHECKIN = "checkin"
    COMPLETE = "complete"
    REOPEN = "reopen"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"
    LOG = "log"


class ActionLogEntry(BaseModel):
    """
    One immutable action log entry.

    ``before``/``after`` are JSON snapshots of the affected record, ``None``
    where there is nothing to capture (e.g. ``before`` of a create).
    """
    id: str
    action_type: str
    entity_type: str
    entity_id: str
    before: Optional[str] = None
    after: Optional[str] = None
    timestamp: str = Field(..., description="ISO-8601 UTC time the action was recorded")


class UndoResponse(BaseModel):
    undone: bool
    message: Optional[str] = None
