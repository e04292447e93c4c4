"""
Sync schemas for the local-first replication engine.
Last-write-wins by ``updated_at``, compared per record.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional
from enum import Enum


# ===========================
# Enums
# ===========================

class SyncState(str, Enum):
    """Status signal shown next to the sync button."""
    IDLE = "idle"
    SYNCING = "syncing"
    OK = "ok"
    ERROR = "error"


class SyncOutcome(str, Enum):
    """Result of one ``sync_all`` invocation."""
    OK = "ok"
    ERROR = "error"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    IN_PROGRESS = "in_progress"
    NOT_CONFIGURED = "not_configured"
    NO_IDENTITY = "no_identity"


# ===========================
# Sync Results
# ===========================

class CollectionSyncReport(BaseModel):
    """What happened to one collection during a cycle."""
    collection: str
    pushed: int = Field(0, description="Local records upserted to the remote")
    fetched: int = Field(0, description="Remote records fetched")
    pulled: int = Field(0, description="Remote records that overwrote (or created) a local record")


class SyncResult(BaseModel):
    outcome: SyncOutcome
    skip_reason: Optional[SkipReason] = None
    error: Optional[str] = None
    failed_collection: Optional[str] = None
    collections: List[CollectionSyncReport] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.outcome == SyncOutcome.OK


# ===========================
# Sync Status
# ===========================

class SyncStatusResponse(BaseModel):
    state: SyncState
    in_progress: bool
    online: bool
    last_sync_at: Optional[str] = None
    last_error: Optional[str] = None


class SyncNowResponse(BaseModel):
    """One-shot notification for a manual sync."""
    message: str
    result: SyncResult


class ConnectivityUpdate(BaseModel):
    online: bool


# ===========================
# Remote configuration
# ===========================

class RemoteConfigUpdate(BaseModel):
    supabase_url: str = Field(..., min_length=1, description="Base URL of the remote project")
    supabase_key: str = Field(..., min_length=1, description="Public API key")

    @field_validator("supabase_url")
    @classmethod
    def _url(cls, v):
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


class RemoteConfigResponse(BaseModel):
    supabase_url: Optional[str] = None
    configured: bool
    signed_in: bool
    last_sync: Optional[str] = None


class AuthSession(BaseModel):
    """Opaque identity handed over by the external auth flow."""
    user_id: str = Field(..., min_length=1)
    access_token: str = Field(..., min_length=1)
