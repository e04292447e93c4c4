"""
Local action log: an append-only audit trail of mutations with before/after
snapshots. Local-only; it never takes part in sync or merge decisions.
"""

import json
import logging
import uuid
from typing import Any, List, Optional

from myos.core.timestamps import Clock, parse_timestamp_or_none, to_iso, utcnow
from myos.database.store import LocalStore
from myos.schemas.action_log import ActionLogEntry, ActionType

logger = logging.getLogger(__name__)

ACTION_LOG_COLLECTION = "action_logs"


def _snapshot(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, sort_keys=True, default=str)


class ActionLogger:
    """
    Records domain actions to the local store.

    Recording is best-effort: a failure is logged and swallowed so it never
    fails the mutation that triggered it.
    """

    def __init__(self, store: LocalStore, clock: Clock = utcnow):
        self.store = store
        self.clock = clock

    async def record(
        self,
        action_type: ActionType,
        entity_type: str,
        entity_id: str,
        before: Any = None,
        after: Any = None,
    ) -> Optional[ActionLogEntry]:
        """
        Append an action log entry.

        Args:
            action_type: What happened (create, update, delete, ...)
            entity_type: Collection of the affected record
            entity_id: Id of the affected record
            before: Record snapshot before the action (None for creates)
            after: Record snapshot after the action

        Returns:
            The stored entry, or None if it could not be written
        """
        try:
            entry = ActionLogEntry(
                id=str(uuid.uuid4()),
                action_type=ActionType(action_type).value,
                entity_type=entity_type,
                entity_id=entity_id,
                before=_snapshot(before),
                after=_snapshot(after),
                timestamp=to_iso(self.clock()),
            )
            await self.store.put(ACTION_LOG_COLLECTION, entry.model_dump())
            return entry
        except Exception as e:
            logger.warning(f"Failed to record {action_type} action for {entity_type}/{entity_id}: {e}")
            return None

    async def _entries(self) -> List[ActionLogEntry]:
        rows = await self.store.get_all(ACTION_LOG_COLLECTION)
        return [ActionLogEntry.model_validate(row) for row in rows]

    async def recent(self, limit: int = 50) -> List[ActionLogEntry]:
        """Most recent entries, newest first."""
        entries = await self._entries()
        entries.sort(key=lambda e: parse_timestamp_or_none(e.timestamp) or utcnow(), reverse=True)
        return entries[:limit]

    async def history(self, entity_id: str) -> List[ActionLogEntry]:
        """Causal history of one entity, oldest first."""
        entries = [e for e in await self._entries() if e.entity_id == entity_id]
        entries.sort(key=lambda e: parse_timestamp_or_none(e.timestamp) or utcnow())
        return entries
