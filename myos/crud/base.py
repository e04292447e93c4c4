# myos/crud/base.py
"""
Shared domain operations for every syncable record collection.

Every mutation follows the same path: validate, stamp timestamps, write to
the local store, append to the action log, publish ``record.changed``.
Validation always happens before the write so a rejected operation leaves
no partial state behind.
"""
import copy
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel

from myos.core.exceptions import NotFound
from myos.core.timestamps import Clock, stamp, to_iso, utcnow
from myos.database.store import LocalStore
from myos.schemas.action_log import ActionType
from myos.schemas.common import RecordBase, validate_model
from myos.services.action_log import ActionLogger
from myos.services.event_bus import EventBus, EventType
from myos.services.undo import UndoBuffer

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class RecordCRUD:
    collection: str = ""
    entity_model: Type[RecordBase] = RecordBase
    create_model: Optional[Type[BaseModel]] = None
    update_model: Optional[Type[BaseModel]] = None

    def __init__(
        self,
        store: LocalStore,
        action_log: Optional[ActionLogger] = None,
        events: Optional[EventBus] = None,
        undo: Optional[UndoBuffer] = None,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.action_log = action_log or ActionLogger(store, clock)
        self.events = events
        self.undo = undo
        self.clock = clock

    # ===========================
    # Reads
    # ===========================

    async def get(self, record_id: str) -> Record:
        """Get a record by id, tombstones included."""
        record = await self.store.get(self.collection, record_id)
        if record is None:
            raise NotFound(self.collection, record_id)
        return record

    async def get_live(self, record_id: str) -> Record:
        """Get a record that has not been soft-deleted."""
        record = await self.get(record_id)
        if record.get("deleted_at"):
            raise NotFound(self.collection, record_id)
        return record

    async def list_live(self) -> List[Record]:
        return await self.store.get_live(self.collection)

    async def list_all(self) -> List[Record]:
        return await self.store.get_all(self.collection)

    # ===========================
    # Writes
    # ===========================

    def _now_iso(self) -> str:
        return to_iso(self.clock())

    def _new_id(self, fields: Record) -> str:
        return str(uuid.uuid4())

    def _build(self, fields: Record) -> Record:
        now = self._now_iso()
        data = {
            "labels": [],
            **fields,
            "id": self._new_id(fields),
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        return validate_model(self.entity_model, data).to_record()

    def _fields_for_create(self, payload: BaseModel) -> Record:
        fields = payload.model_dump(mode="json")
        if fields.get("labels") is None:
            fields["labels"] = []
        return fields

    async def _check_create(self, fields: Record) -> None:
        """Hook for collection-specific checks that need the store."""

    async def _save(self, action: ActionType, before: Optional[Record], record: Record) -> Record:
        saved = await self.store.put(self.collection, record)
        await self.action_log.record(action, self.collection, saved["id"], before, saved)
        if self.events:
            await self.events.publish(
                EventType.RECORD_CHANGED,
                {"collection": self.collection, "id": saved["id"], "action": action.value},
            )
        return saved

    async def create(self, data: Any) -> Record:
        """Create a record with a fresh id and timestamps."""
        payload = validate_model(self.create_model, data)
        fields = self._fields_for_create(payload)
        await self._check_create(fields)
        record = self._build(fields)
        return await self._save(ActionType.CREATE, None, record)

    async def _insert(self, fields: Record, action: ActionType = ActionType.CREATE) -> Record:
        record = self._build(fields)
        return await self._save(action, None, record)

    async def _mutate(
        self,
        record_id: str,
        action: ActionType,
        apply: Callable[[Record], None],
        require_live: bool = True,
    ) -> Record:
        current = await (self.get_live(record_id) if require_live else self.get(record_id))
        updated = copy.deepcopy(current)
        apply(updated)
        updated["id"] = current["id"]
        updated["created_at"] = current.get("created_at")
        updated["updated_at"] = stamp(current.get("updated_at"), self.clock)
        record = validate_model(self.entity_model, updated).to_record()
        return await self._save(action, current, record)

    async def update(self, record_id: str, data: Any) -> Record:
        """Apply a partial update; only fields present in ``data`` change."""
        changes = validate_model(self.update_model, data).model_dump(mode="json", exclude_unset=True)
        if "labels" in changes and changes["labels"] is None:
            changes["labels"] = []
        return await self._mutate(record_id, ActionType.UPDATE, lambda r: r.update(changes))

    def _describe(self, record: Record) -> str:
        return str(record.get("title") or record.get("name") or record.get("date") or record["id"])

    async def soft_delete(self, record_id: str) -> Record:
        """Mark a record deleted. The tombstone keeps every other field and still syncs."""
        deleted_at = self._now_iso()

        def apply(r: Record) -> None:
            r["deleted_at"] = deleted_at

        record = await self._mutate(record_id, ActionType.DELETE, apply)
        if self.undo:
            self.undo.offer(f'Deleted "{self._describe(record)}"', lambda: self.restore(record_id))
        return record

    async def restore(self, record_id: str) -> Record:
        """Undo a soft delete: clear ``deleted_at`` and bump ``updated_at``."""
        def apply(r: Record) -> None:
            r["deleted_at"] = None

        return await self._mutate(record_id, ActionType.RESTORE, apply, require_live=False)
