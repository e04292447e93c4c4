# myos/crud/habit.py
from typing import List, Optional
from datetime import timedelta

from myos.core.config import settings
from myos.core.exceptions import ValidationError
from myos.core.timestamps import local_date, parse_local_date
from myos.crud.base import RecordCRUD, Record
from myos.schemas.action_log import ActionType
from myos.schemas.habit import (
    Habit, HabitCreate, HabitUpdate, HabitLog, HabitLogSet, HabitLogStatus, HabitDay,
)
from myos.schemas.common import validate_model


class HabitCRUD(RecordCRUD):
    collection = "habits"
    entity_model = Habit
    create_model = HabitCreate
    update_model = HabitUpdate

    def _fields_for_create(self, payload: HabitCreate) -> Record:
        fields = super()._fields_for_create(payload)
        fields["archived_at"] = None
        return fields

    async def archive(self, habit_id: str) -> Record:
        archived_at = self._now_iso()

        def apply(r: Record) -> None:
            r["archived_at"] = archived_at

        return await self._mutate(habit_id, ActionType.ARCHIVE, apply)

    async def unarchive(self, habit_id: str) -> Record:
        def apply(r: Record) -> None:
            r["archived_at"] = None

        return await self._mutate(habit_id, ActionType.UNARCHIVE, apply)

    async def list_active(self) -> List[Record]:
        """Live, non-archived habits ordered by title."""
        habits = [h for h in await self.list_live() if not h.get("archived_at")]
        return sorted(habits, key=lambda h: str(h.get("title", "")).lower())


class HabitLogCRUD(RecordCRUD):
    """One outcome per habit per day."""
    collection = "habit_logs"
    entity_model = HabitLog
    create_model = HabitLog
    update_model = HabitLogSet

    def __init__(self, *args, max_age_days: Optional[int] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_age_days = settings.HABIT_LOG_MAX_AGE_DAYS if max_age_days is None else max_age_days

    def _check_date(self, value: str) -> str:
        day = parse_local_date(value)
        today = parse_local_date(local_date(self.clock()))
        if day > today:
            raise ValidationError("Cannot log a habit for a future date", field="date")
        if day < today - timedelta(days=self.max_age_days):
            raise ValidationError(
                f"Cannot log a habit more than {self.max_age_days} days in the past", field="date"
            )
        return value

    async def _find(self, habit_id: str, date: str, include_deleted: bool = False) -> Optional[Record]:
        logs = await (self.list_all() if include_deleted else self.list_live())
        matches = [l for l in logs if l.get("habit_id") == habit_id and l.get("date") == date]
        if not matches:
            return None
        # Prefer a live log over a tombstone.
        matches.sort(key=lambda l: (l.get("deleted_at") is None, l.get("updated_at") or ""), reverse=True)
        return matches[0]

    async def _check_habit(self, habit_id: str) -> None:
        habit = await self.store.get("habits", habit_id)
        if habit is None or habit.get("deleted_at"):
            raise ValidationError(f"Habit '{habit_id}' does not exist", field="habit_id")

    async def create(self, data) -> Record:
        fields = dict(data) if isinstance(data, dict) else data.model_dump(mode="json")
        for key in ("habit_id", "date", "status"):
            if not fields.get(key):
                raise ValidationError(f"{key}: Field required", field=key)
        if fields["status"] not in {s.value for s in HabitLogStatus}:
            raise ValidationError(f"Invalid habit log status: {fields['status']}", field="status")
        self._check_date(fields["date"])
        await self._check_habit(fields["habit_id"])
        if await self._find(fields["habit_id"], fields["date"]):
            raise ValidationError(
                f"Habit already logged for {fields['date']}", field="date"
            )
        return await self._insert({
            "habit_id": fields["habit_id"],
            "date": fields["date"],
            "status": fields["status"],
            "labels": fields.get("labels") or [],
        }, ActionType.LOG)

    async def set_status(self, habit_id: str, data) -> Optional[Record]:
        """
        Set a habit's outcome for a day.

        ``status=None`` clears the day by soft-deleting its log. Setting a status
        on a cleared day revives the tombstoned log instead of creating a new one.

        Returns:
            The live log, or None when the day was cleared
        """
        payload = validate_model(HabitLogSet, data)
        self._check_date(payload.date)
        await self._check_habit(habit_id)
        status = payload.status.value if isinstance(payload.status, HabitLogStatus) else payload.status

        existing = await self._find(habit_id, payload.date, include_deleted=True)
        if status is None:
            if existing is None or existing.get("deleted_at"):
                return None
            await self.soft_delete(existing["id"])
            return None

        if existing is None:
            return await self._insert(
                {"habit_id": habit_id, "date": payload.date, "status": status}, ActionType.LOG
            )

        def apply(r: Record) -> None:
            r["status"] = status
            r["deleted_at"] = None

        return await self._mutate(existing["id"], ActionType.LOG, apply, require_live=False)

    async def logs_for_date(self, date: str) -> List[Record]:
        return [l for l in await self.list_live() if l.get("date") == date]

    async def today(self, habits: List[Record], date: Optional[str] = None) -> List[HabitDay]:
        """Pair each habit with its logged status for ``date`` (today by default)."""
        date = date or local_date(self.clock())
        by_habit = {l["habit_id"]: l.get("status") for l in await self.logs_for_date(date)}
        return [HabitDay(habit=h, status=by_habit.get(h["id"])) for h in habits]
