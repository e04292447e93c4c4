# myos/services/dashboard_service.py
"""
Today dashboard: the urgent slice of every section for the current local day.
"""
from datetime import datetime
from typing import Optional

from myos.core.timestamps import Clock, local_date, utcnow
from myos.crud.checkin import CheckinCRUD
from myos.crud.habit import HabitCRUD, HabitLogCRUD
from myos.crud.journal import JournalCRUD
from myos.crud.prayer import PrayerCRUD, PrayerLogCRUD
from myos.crud.task import TaskCRUD
from myos.schemas.today import TodayResponse
from myos.services.status_engine import Severity
from myos.services.sync_service import SyncEngine

TODAY_SECTION_LIMIT = 5


class DashboardService:
    def __init__(
        self,
        checkins: CheckinCRUD,
        tasks: TaskCRUD,
        habits: HabitCRUD,
        habit_logs: HabitLogCRUD,
        prayers: PrayerCRUD,
        prayer_logs: PrayerLogCRUD,
        journal: JournalCRUD,
        sync_engine: Optional[SyncEngine] = None,
        clock: Clock = utcnow,
    ):
        self.checkins = checkins
        self.tasks = tasks
        self.habits = habits
        self.habit_logs = habit_logs
        self.prayers = prayers
        self.prayer_logs = prayer_logs
        self.journal = journal
        self.sync_engine = sync_engine
        self.clock = clock

    async def today(self, now: Optional[datetime] = None) -> TodayResponse:
        now = now or self.clock()
        date = local_date(now)

        statuses = await self.checkins.list_with_status(now=now, newest_anchor_first=True)
        urgent = [s for s in statuses if s.severity != Severity.GREEN.value][:TODAY_SECTION_LIMIT]

        open_tasks = await self.tasks.list_open(now=now)

        return TodayResponse(
            date=date,
            urgent_checkins=urgent,
            open_tasks=open_tasks[:TODAY_SECTION_LIMIT],
            open_task_count=len(open_tasks),
            habits=await self.habit_logs.today(await self.habits.list_active(), date),
            prayers=await self.prayer_logs.today(await self.prayers.list_sorted(), date),
            journal_entry=await self.journal.entry_for_date(date),
            sync=await self.sync_engine.status() if self.sync_engine else None,
        )
