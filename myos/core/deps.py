# myos/core/deps.py
"""
Application wiring: one container per app holding the store, services and
CRUD objects. Routers get it through ``get_container``.
"""
import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from sqlalchemy.engine import Engine

from myos.core.background_tasks import SyncScheduler
from myos.core.config import settings
from myos.core.exceptions import MyOSError, NotFound, StorageUnavailable, ValidationError
from myos.core.timestamps import Clock, utcnow
from myos.crud.checkin import CheckinCRUD
from myos.crud.habit import HabitCRUD, HabitLogCRUD
from myos.crud.journal import JournalCRUD
from myos.crud.label import LabelCRUD
from myos.crud.prayer import PrayerCRUD, PrayerLogCRUD
from myos.crud.task import TaskCRUD
from myos.database.store import LocalStore
from myos.services.action_log import ActionLogger
from myos.services.dashboard_service import DashboardService
from myos.services.event_bus import EventBus
from myos.services.search_service import SearchService
from myos.services.sync_service import RemoteFactory, SyncEngine, supabase_factory
from myos.services.undo import UndoBuffer

logger = logging.getLogger(__name__)


class AppContainer:
    def __init__(
        self,
        engine: Engine,
        remote_factory: RemoteFactory = supabase_factory,
        clock: Clock = utcnow,
        sync_interval: Optional[float] = None,
    ):
        self.clock = clock
        self.store = LocalStore(engine)
        self.events = EventBus()
        self.action_log = ActionLogger(self.store, clock)
        self.undo = UndoBuffer(settings.UNDO_WINDOW_SECONDS, clock)

        shared = dict(action_log=self.action_log, events=self.events, undo=self.undo, clock=clock)
        self.checkins = CheckinCRUD(self.store, **shared)
        self.tasks = TaskCRUD(self.store, **shared)
        self.habits = HabitCRUD(self.store, **shared)
        self.habit_logs = HabitLogCRUD(self.store, **shared)
        self.prayers = PrayerCRUD(self.store, **shared)
        self.prayer_logs = PrayerLogCRUD(self.store, **shared)
        self.journal = JournalCRUD(self.store, **shared)
        self.labels = LabelCRUD(self.store, **shared)

        self.sync_engine = SyncEngine(self.store, self.events, remote_factory=remote_factory, clock=clock)
        self.scheduler = SyncScheduler(self.sync_engine, self.events, interval_seconds=sync_interval)
        self.search = SearchService(self.store)
        self.dashboard = DashboardService(
            self.checkins, self.tasks, self.habits, self.habit_logs,
            self.prayers, self.prayer_logs, self.journal,
            sync_engine=self.sync_engine, clock=clock,
        )


def get_container(request: Request) -> AppContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application is not initialised"
        )
    return container


def http_error(e: MyOSError) -> HTTPException:
    """Map a domain error onto the HTTP status the UI expects."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message)
    if isinstance(e, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, StorageUnavailable):
        logger.error(f"Storage error: {e.message}")
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
