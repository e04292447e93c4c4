# myos/services/sync_service.py
"""
Synchronization engine.

One cycle walks the syncable collections in a fixed order. For each one it
pushes every local record (tombstones included) to the remote, then pulls
the full remote table and keeps whichever copy has the later ``updated_at``.
Conflicts resolve per record, last write wins; there is no field merge.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from myos.core.exceptions import MyOSError
from myos.core.timestamps import Clock, EPOCH, parse_timestamp_or_none, to_iso, utcnow
from myos.database.store import LocalStore
from myos.models.store import SYNC_COLLECTIONS
from myos.schemas.sync import (
    CollectionSyncReport, SkipReason, SyncOutcome, SyncResult, SyncState, SyncStatusResponse,
)
from myos.services.event_bus import EventBus, EventType
from myos.services.remote import (
    Identity, RemoteBackend, RemoteConfig, SupabaseRemote, load_identity, load_remote_config,
)

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "last_sync"

RemoteFactory = Callable[[RemoteConfig, Identity], RemoteBackend]


def supabase_factory(config: RemoteConfig, identity: Identity) -> RemoteBackend:
    return SupabaseRemote(config.url, config.key, access_token=identity.access_token)


def remote_is_newer(remote: Dict, local: Optional[Dict]) -> bool:
    """True when ``remote`` should overwrite ``local``. A missing local timestamp counts as the earliest."""
    if local is None:
        return True
    remote_ts = parse_timestamp_or_none(remote.get("updated_at"))
    if remote_ts is None:
        return False
    local_ts = parse_timestamp_or_none(local.get("updated_at")) or EPOCH
    return remote_ts > local_ts


class SyncEngine:
    """
    Replicates the local store with the remote backend.

    Only one cycle runs at a time per engine; a call that arrives while a
    cycle is in flight returns a ``skipped`` result without touching anything.
    """

    def __init__(
        self,
        store: LocalStore,
        events: Optional[EventBus] = None,
        remote_factory: RemoteFactory = supabase_factory,
        collections: List[str] = SYNC_COLLECTIONS,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.events = events
        self.remote_factory = remote_factory
        self.collections = list(collections)
        self.clock = clock

        self.state = SyncState.IDLE
        self.last_error: Optional[str] = None
        self.last_sync_at: Optional[datetime] = None
        self.online = True
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    async def _set_state(self, state: SyncState, error: Optional[str] = None) -> None:
        self.state = state
        self.last_error = error
        if self.events:
            await self.events.publish(
                EventType.SYNC_STATUS_CHANGED,
                {"state": state.value, "error": error},
            )

    async def last_sync(self) -> Optional[str]:
        """Last successful sync, from memory or the persisted config value."""
        if self.last_sync_at is not None:
            return to_iso(self.last_sync_at)
        value = await self.store.get_config(LAST_SYNC_KEY)
        return str(value) if value else None

    async def status(self) -> SyncStatusResponse:
        return SyncStatusResponse(
            state=self.state,
            in_progress=self._in_progress,
            online=self.online,
            last_sync_at=await self.last_sync(),
            last_error=self.last_error,
        )

    async def sync_all(self, manual: bool = False) -> SyncResult:
        """
        Run one full sync cycle.

        Never raises: failures end up in the returned result and in the
        status signal. Records synced before a failure stay synced.

        Args:
            manual: Whether the user asked for this cycle (only affects logging)
        """
        if self._in_progress:
            logger.debug("Sync already in progress, skipping")
            return SyncResult(outcome=SyncOutcome.SKIPPED, skip_reason=SkipReason.IN_PROGRESS)

        self._in_progress = True
        started_at = self.clock()
        reports: List[CollectionSyncReport] = []
        current: Optional[str] = None
        try:
            config = await load_remote_config(self.store)
            if config is None:
                logger.debug("Remote not configured, skipping sync")
                return SyncResult(outcome=SyncOutcome.SKIPPED, skip_reason=SkipReason.NOT_CONFIGURED)
            identity = await load_identity(self.store)
            if identity is None:
                logger.debug("No signed-in user, skipping sync")
                return SyncResult(outcome=SyncOutcome.SKIPPED, skip_reason=SkipReason.NO_IDENTITY)

            logger.info(f"Starting {'manual' if manual else 'automatic'} sync for user {identity.user_id}")
            await self._set_state(SyncState.SYNCING)
            remote = self.remote_factory(config, identity)

            for collection in self.collections:
                current = collection
                reports.append(await self._sync_collection(remote, collection))
            current = None

            self.last_sync_at = self.clock()
            await self.store.set_config(LAST_SYNC_KEY, to_iso(self.last_sync_at))
            await self._set_state(SyncState.OK)
            result = SyncResult(
                outcome=SyncOutcome.OK,
                collections=reports,
                started_at=started_at,
                finished_at=self.clock(),
            )
            logger.info(
                f"Sync complete: pushed {sum(r.pushed for r in reports)}, "
                f"pulled {sum(r.pulled for r in reports)}"
            )
        except Exception as e:
            message = e.message if isinstance(e, MyOSError) else str(e)
            logger.error(f"Sync failed{f' on {current}' if current else ''}: {message}")
            await self._set_state(SyncState.ERROR, message)
            result = SyncResult(
                outcome=SyncOutcome.ERROR,
                error=message,
                failed_collection=current,
                collections=reports,
                started_at=started_at,
                finished_at=self.clock(),
            )
        finally:
            self._in_progress = False

        if self.events:
            await self.events.publish(EventType.SYNC_COMPLETED, result.model_dump(mode="json"))
        return result

    async def _sync_collection(self, remote: RemoteBackend, collection: str) -> CollectionSyncReport:
        report = CollectionSyncReport(collection=collection)

        local = await self.store.get_all(collection)
        if local:
            await remote.upsert(collection, local)
            report.pushed = len(local)

        rows = await remote.fetch_all(collection)
        report.fetched = len(rows)

        # Compare against the store as it is now; a local write may have landed during the push.
        current = {r["id"]: r for r in await self.store.get_all(collection)}
        for row in rows:
            row_id = row.get("id")
            if not row_id:
                logger.warning(f"Ignoring remote {collection} row without id")
                continue
            if remote_is_newer(row, current.get(str(row_id))):
                await self.store.put(collection, {**row, "id": str(row_id)})
                report.pulled += 1

        logger.debug(f"Synced {collection}: pushed {report.pushed}, fetched {report.fetched}, pulled {report.pulled}")
        return report
