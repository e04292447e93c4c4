# myos/crud/checkin.py
from typing import List, Optional
from datetime import datetime

from myos.crud.base import RecordCRUD, Record
from myos.core.timestamps import to_iso
from myos.schemas.action_log import ActionType
from myos.schemas.checkin import Checkin, CheckinCreate, CheckinUpdate, CheckinWithStatus
from myos.services import status_engine
from myos.services.status_engine import Severity


class CheckinCRUD(RecordCRUD):
    collection = "checkins"
    entity_model = Checkin
    create_model = CheckinCreate
    update_model = CheckinUpdate

    def _fields_for_create(self, payload: CheckinCreate) -> Record:
        fields = super()._fields_for_create(payload)
        if not fields.get("first_due_at"):
            fields["first_due_at"] = self._now_iso()
        fields["last_checkin_at"] = None
        return fields

    async def check_in(self, checkin_id: str) -> Record:
        """Record a completion now; it becomes the new anchor."""
        checked_at = self._now_iso()

        def apply(r: Record) -> None:
            r["last_checkin_at"] = checked_at

        return await self._mutate(checkin_id, ActionType.CHECKIN, apply)

    async def list_with_status(
        self,
        severity: Optional[Severity] = None,
        now: Optional[datetime] = None,
        newest_anchor_first: bool = False,
        limit: Optional[int] = None,
    ) -> List[CheckinWithStatus]:
        """
        Live check-ins with their derived state, most urgent first.

        Args:
            severity: Only return check-ins in this band
            now: Evaluation time (defaults to the clock)
            newest_anchor_first: Secondary ordering inside a severity band
            limit: Maximum number of results
        """
        now = now or self.clock()
        checkins = await self.list_live()
        if severity is not None:
            checkins = [c for c in checkins if status_engine.severity(c, now) == severity]

        ordered = status_engine.sort_checkins(checkins, now, newest_anchor_first=newest_anchor_first)
        if limit is not None:
            ordered = ordered[:limit]

        results = []
        for c in ordered:
            state = status_engine.evaluate(c, now)
            results.append(
                CheckinWithStatus(
                    checkin=c,
                    severity=state.severity.value,
                    due_at=to_iso(state.due_at),
                    yellow_at=to_iso(state.yellow_at),
                    red_at=to_iso(state.red_at),
                    days_since_anchor=status_engine.days_since_anchor(c, now),
                )
            )
        return results
