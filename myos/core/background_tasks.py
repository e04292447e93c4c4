# myos/core/background_tasks.py
"""
Background sync triggers: periodic timer, reconnect, manual, and after local edits.
"""
import asyncio
import logging
from typing import Optional

from myos.core.config import settings
from myos.schemas.sync import SyncNowResponse, SyncOutcome, SkipReason, SyncResult
from myos.services.event_bus import EventBus, EventType
from myos.services.sync_service import SyncEngine

logger = logging.getLogger(__name__)


class SyncScheduler:
    """Starts sync cycles on the engine. All triggers share the engine's reentrancy guard."""

    def __init__(
        self,
        engine: SyncEngine,
        events: Optional[EventBus] = None,
        interval_seconds: Optional[float] = None,
    ):
        self.engine = engine
        self.events = events
        self.interval = settings.SYNC_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        self.tasks: list[asyncio.Task] = []
        self._pending: set[asyncio.Task] = set()
        self._running = False

    async def start(self, sync_on_start: bool = False):
        """Start the periodic sync task and listen for local changes."""
        if self._running:
            logger.warning("Sync scheduler already running")
            return

        self._running = True
        if self.events:
            self.events.subscribe(EventType.RECORD_CHANGED, self._on_record_changed)

        self.tasks.append(asyncio.create_task(self.periodic_sync_task()))
        if sync_on_start:
            self.request_sync()
        logger.info(f"Sync scheduler started (every {self.interval:.0f}s)")

    async def stop(self):
        """Stop the periodic task and wait for in-flight triggered cycles."""
        if not self._running:
            return

        logger.info("Stopping sync scheduler...")
        self._running = False
        if self.events:
            self.events.unsubscribe(EventType.RECORD_CHANGED, self._on_record_changed)

        for task in self.tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.tasks.clear()

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        logger.info("Sync scheduler stopped")

    async def periodic_sync_task(self):
        """Run a sync cycle every ``interval`` seconds while online."""
        while self._running:
            try:
                await asyncio.sleep(self.interval)
                if self.engine.online:
                    await self.engine.sync_all()
            except asyncio.CancelledError:
                logger.info("Periodic sync task cancelled")
                break
            except Exception as e:
                logger.error(f"Error in periodic sync task: {e}")

    def request_sync(self) -> Optional[asyncio.Task]:
        """
        Fire-and-forget sync. Dropped when offline or when a cycle is already running.

        Must be called from a running event loop.
        """
        if not self.engine.online or self.engine.in_progress:
            return None
        task = asyncio.get_running_loop().create_task(self.engine.sync_all())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _on_record_changed(self, event):
        self.request_sync()

    async def set_online(self, online: bool) -> Optional[SyncResult]:
        """Record connectivity. Coming back online runs a cycle straight away."""
        was_online = self.engine.online
        self.engine.online = online
        if online and not was_online:
            logger.info("Connectivity restored, syncing")
            return await self.engine.sync_all()
        return None

    async def sync_now(self) -> SyncNowResponse:
        """Manual sync with a one-shot message for the user."""
        result = await self.engine.sync_all(manual=True)
        if result.outcome == SyncOutcome.OK:
            message = "Sync complete"
        elif result.outcome == SyncOutcome.ERROR:
            message = f"Sync failed: {result.error}"
        elif result.skip_reason == SkipReason.IN_PROGRESS:
            message = "Sync already in progress"
        elif result.skip_reason == SkipReason.NOT_CONFIGURED:
            message = "Remote sync is not configured"
        else:
            message = "Sign in to sync"
        return SyncNowResponse(message=message, result=result)
