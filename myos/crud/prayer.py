# myos/crud/prayer.py
from typing import Dict, List, Optional

from myos.core.exceptions import ValidationError
from myos.core.timestamps import local_date, parse_local_date
from myos.crud.base import RecordCRUD, Record
from myos.schemas.action_log import ActionType
from myos.schemas.prayer import Prayer, PrayerCreate, PrayerUpdate, PrayerLog, PrayerDay

PRAYER_HISTORY_LIMIT = 30


class PrayerCRUD(RecordCRUD):
    collection = "prayers"
    entity_model = Prayer
    create_model = PrayerCreate
    update_model = PrayerUpdate

    async def list_sorted(self) -> List[Record]:
        return sorted(await self.list_live(), key=lambda p: str(p.get("title", "")).lower())


class PrayerLogCRUD(RecordCRUD):
    """Per-day prayer counters."""
    collection = "prayer_logs"
    entity_model = PrayerLog
    create_model = PrayerLog
    update_model = PrayerLog

    async def _find(self, prayer_id: str, date: str) -> Optional[Record]:
        matches = [
            l for l in await self.list_all()
            if l.get("prayer_id") == prayer_id and l.get("date") == date
        ]
        if not matches:
            return None
        matches.sort(key=lambda l: (l.get("deleted_at") is None, l.get("updated_at") or ""), reverse=True)
        return matches[0]

    async def increment(self, prayer_id: str, date: Optional[str] = None) -> Record:
        """
        Count one more prayer for ``date`` (today by default).

        A tombstoned log for the same day is revived and restarts at 1.
        """
        date = date or local_date(self.clock())
        parse_local_date(date)
        prayer = await self.store.get("prayers", prayer_id)
        if prayer is None or prayer.get("deleted_at"):
            raise ValidationError(f"Prayer '{prayer_id}' does not exist", field="prayer_id")

        existing = await self._find(prayer_id, date)
        if existing is None:
            return await self._insert({"prayer_id": prayer_id, "date": date, "count": 1}, ActionType.LOG)

        def apply(r: Record) -> None:
            r["count"] = 1 if r.get("deleted_at") else int(r.get("count") or 0) + 1
            r["deleted_at"] = None

        return await self._mutate(existing["id"], ActionType.LOG, apply, require_live=False)

    async def history(self, prayer_id: str, limit: int = PRAYER_HISTORY_LIMIT) -> List[Record]:
        """Live logs for a prayer, newest day first."""
        logs = [l for l in await self.list_live() if l.get("prayer_id") == prayer_id]
        logs.sort(key=lambda l: l.get("date", ""), reverse=True)
        return logs[:limit]

    async def counts_for_date(self, date: str) -> Dict[str, int]:
        return {
            l["prayer_id"]: int(l.get("count") or 0)
            for l in await self.list_live() if l.get("date") == date
        }

    async def today(self, prayers: List[Record], date: Optional[str] = None) -> List[PrayerDay]:
        date = date or local_date(self.clock())
        counts = await self.counts_for_date(date)
        return [PrayerDay(prayer=p, count=counts.get(p["id"], 0)) for p in prayers]
