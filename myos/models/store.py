"""
Storage tables for the embedded local store.

The store is schema-agnostic: each record is kept as an opaque JSON payload
keyed by (collection, id). Per-collection shapes live in ``myos.schemas`` and
are validated by the domain operations, not here.
"""

from sqlmodel import SQLModel, Field, Column, JSON
from typing import Optional, Dict, Any, Tuple
from datetime import datetime, timezone


# Collections replicated to the remote backend, in sync order.
SYNC_COLLECTIONS: Tuple[str, ...] = (
    "checkins",
    "tasks",
    "habits",
    "habit_logs",
    "prayers",
    "prayer_logs",
    "journal_entries",
    "labels",
)

# Collections that never leave the device.
LOCAL_ONLY_COLLECTIONS: Tuple[str, ...] = ("action_logs",)

COLLECTIONS: Tuple[str, ...] = SYNC_COLLECTIONS + LOCAL_ONLY_COLLECTIONS

CONFIG_COLLECTION = "config"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredRecord(SQLModel, table=True):
    """
    One record of one collection.

    Attributes:
        collection: Collection name (one of COLLECTIONS)
        id: Record identifier, unique within its collection
        payload: Full record as JSON, including timestamps and tombstone
        written_at: When this row was last written locally (diagnostics only,
            never used for conflict resolution)
    """
    __tablename__ = "stored_records"

    collection: str = Field(primary_key=True, max_length=64)
    id: str = Field(primary_key=True, max_length=255)
    payload: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    written_at: datetime = Field(default_factory=_utcnow)


class ConfigEntry(SQLModel, table=True):
    """
    Process-wide key/value configuration (remote endpoint, credentials,
    auth session, last sync time).
    """
    __tablename__ = "config_entries"

    key: str = Field(primary_key=True, max_length=255)
    value: Optional[Any] = Field(default=None, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=_utcnow)
