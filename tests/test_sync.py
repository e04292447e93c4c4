import asyncio

from myos.core.exceptions import RemoteRejected, RemoteUnreachable
from myos.models.store import SYNC_COLLECTIONS
from myos.schemas.sync import SkipReason, SyncOutcome, SyncState
from myos.services.event_bus import EventType
from myos.services.remote import AUTH_SESSION_KEY
from myos.services.sync_service import remote_is_newer

from conftest import run


def record(record_id, updated_at, **fields):
    return {"id": record_id, "updated_at": updated_at, "deleted_at": None, **fields}


class TestSkips:
    def test_not_configured(self, container, remote):
        result = run(container.sync_engine.sync_all())
        assert result.outcome == SyncOutcome.SKIPPED
        assert result.skip_reason == SkipReason.NOT_CONFIGURED
        assert container.sync_engine.state == SyncState.IDLE
        assert remote.upsert_calls == [] and remote.fetch_calls == []

    def test_no_identity(self, signed_in, remote):
        run(signed_in.store.set_config(AUTH_SESSION_KEY, None))
        result = run(signed_in.sync_engine.sync_all())
        assert result.skip_reason == SkipReason.NO_IDENTITY
        assert signed_in.sync_engine.state == SyncState.IDLE
        assert remote.fetch_calls == []


class TestSyncCycle:
    def test_push_and_pull_every_collection_in_order(self, signed_in, remote):
        task = run(signed_in.tasks.create({"title": "a"}))
        result = run(signed_in.sync_engine.sync_all())
        assert result.outcome == SyncOutcome.OK
        assert remote.fetch_calls == list(SYNC_COLLECTIONS)
        # Empty collections are not pushed
        assert remote.upsert_calls == ["tasks"]
        assert remote.rows("tasks")[task["id"]] == task
        assert "action_logs" not in remote.tables

    def test_last_sync_persisted(self, signed_in, clock):
        run(signed_in.sync_engine.sync_all())
        assert run(signed_in.store.get_config("last_sync")) == "2024-06-15T12:00:00.000Z"
        assert signed_in.sync_engine.state == SyncState.OK

    def test_pull_new_remote_record(self, signed_in, remote):
        remote.rows("habits")["h1"] = record("h1", "2024-06-01T00:00:00.000Z", title="Run", extra="kept")
        run(signed_in.sync_engine.sync_all())
        assert run(signed_in.store.get("habits", "h1"))["extra"] == "kept"

    def test_remote_newer_wins(self, signed_in, remote):
        run(signed_in.store.put("tasks", record("t1", "2024-06-01T00:00:00.000Z", title="local")))

        async def edit_remote(collection):
            if collection == "tasks":
                remote.rows("tasks")["t1"] = record("t1", "2024-06-02T00:00:00.000Z", title="remote")

        remote.on_upsert = edit_remote
        run(signed_in.sync_engine.sync_all())
        assert run(signed_in.store.get("tasks", "t1"))["title"] == "remote"

    def test_local_newer_wins(self, signed_in, remote):
        remote.rows("tasks")["t1"] = record("t1", "2024-06-01T00:00:00.000Z", title="remote")
        run(signed_in.store.put("tasks", record("t1", "2024-06-02T00:00:00.000Z", title="local")))
        run(signed_in.sync_engine.sync_all())
        assert run(signed_in.store.get("tasks", "t1"))["title"] == "local"
        assert remote.rows("tasks")["t1"]["title"] == "local"

    def test_equal_timestamps_keep_local(self, signed_in, remote):
        run(signed_in.store.put("tasks", record("t1", "2024-06-01T00:00:00.000Z", title="local")))

        async def edit_remote(collection):
            remote.rows("tasks")["t1"] = record("t1", "2024-06-01T00:00:00.000Z", title="remote")

        remote.on_upsert = edit_remote
        run(signed_in.sync_engine.sync_all())
        assert run(signed_in.store.get("tasks", "t1"))["title"] == "local"

    def test_idempotent(self, signed_in, remote):
        run(signed_in.tasks.create({"title": "a"}))
        remote.rows("habits")["h1"] = record("h1", "2024-06-01T00:00:00.000Z", title="Run")
        first = run(signed_in.sync_engine.sync_all())
        snapshot = {c: run(signed_in.store.get_all(c)) for c in SYNC_COLLECTIONS}
        remote_snapshot = {c: dict(rows) for c, rows in remote.tables.items()}

        second = run(signed_in.sync_engine.sync_all())
        assert {c: run(signed_in.store.get_all(c)) for c in SYNC_COLLECTIONS} == snapshot
        assert {c: dict(rows) for c, rows in remote.tables.items()} == remote_snapshot
        assert sum(r.pulled for r in first.collections) == 1
        assert sum(r.pulled for r in second.collections) == 0

    def test_tombstones_replicate(self, signed_in, remote):
        task = run(signed_in.tasks.create({"title": "a"}))
        run(signed_in.tasks.soft_delete(task["id"]))
        run(signed_in.sync_engine.sync_all())
        assert remote.rows("tasks")[task["id"]]["deleted_at"] is not None

    def test_remote_tombstone_hides_local_record(self, signed_in, remote):
        run(signed_in.store.put("tasks", record("t1", "2024-06-01T00:00:00.000Z", title="a")))

        async def delete_remotely(collection):
            if collection == "tasks":
                remote.rows("tasks")["t1"] = record(
                    "t1", "2024-06-03T00:00:00.000Z", title="a", deleted_at="2024-06-03T00:00:00.000Z"
                )

        remote.on_upsert = delete_remotely
        run(signed_in.sync_engine.sync_all())
        assert run(signed_in.tasks.list_live()) == []

    def test_remote_row_without_timestamp_does_not_overwrite(self, signed_in, remote):
        run(signed_in.store.put("tasks", record("t1", "2024-06-01T00:00:00.000Z", title="local")))

        async def corrupt(collection):
            if collection == "tasks":
                remote.rows("tasks")["t1"] = {"id": "t1", "title": "remote"}

        remote.on_upsert = corrupt
        run(signed_in.sync_engine.sync_all())
        assert run(signed_in.store.get("tasks", "t1"))["title"] == "local"


class TestFailures:
    def test_failure_aborts_and_keeps_partial_progress(self, signed_in, remote):
        remote.rows("checkins")["c1"] = record("c1", "2024-06-01T00:00:00.000Z", title="x")
        remote.rows("habits")["h1"] = record("h1", "2024-06-01T00:00:00.000Z", title="y")
        remote.fail_on[("fetch", "tasks")] = RemoteUnreachable("timed out")

        result = run(signed_in.sync_engine.sync_all())
        assert result.outcome == SyncOutcome.ERROR
        assert result.failed_collection == "tasks"
        assert result.error == "timed out"
        assert remote.fetch_calls == ["checkins", "tasks"]
        assert run(signed_in.store.get("checkins", "c1")) is not None
        assert run(signed_in.store.get("habits", "h1")) is None
        assert signed_in.sync_engine.state == SyncState.ERROR
        assert signed_in.sync_engine.last_error == "timed out"
        assert run(signed_in.store.get_config("last_sync")) is None

    def test_rejected_push_is_reported(self, signed_in, remote):
        run(signed_in.tasks.create({"title": "a"}))
        remote.fail_on[("upsert", "tasks")] = RemoteRejected("permission denied", status_code=403)
        result = run(signed_in.sync_engine.sync_all())
        assert result.outcome == SyncOutcome.ERROR
        assert "permission denied" in result.error

    def test_next_cycle_recovers(self, signed_in, remote):
        remote.fail_on[("fetch", "checkins")] = RemoteUnreachable("offline")
        assert run(signed_in.sync_engine.sync_all()).outcome == SyncOutcome.ERROR
        remote.fail_on.clear()
        assert run(signed_in.sync_engine.sync_all()).outcome == SyncOutcome.OK
        assert signed_in.sync_engine.last_error is None


class TestReentrancy:
    def test_concurrent_calls_run_one_cycle(self, signed_in, remote):
        run(signed_in.tasks.create({"title": "a"}))
        release = None

        async def slow(collection):
            await release.wait()

        remote.on_upsert = slow

        async def scenario():
            nonlocal release
            release = asyncio.Event()
            first = asyncio.create_task(signed_in.sync_engine.sync_all())
            await asyncio.sleep(0)
            second = await signed_in.sync_engine.sync_all()
            third = await signed_in.scheduler.sync_now()
            release.set()
            return await first, second, third

        first, second, third = run(scenario())
        assert first.outcome == SyncOutcome.OK
        assert second.skip_reason == SkipReason.IN_PROGRESS
        assert third.result.skip_reason == SkipReason.IN_PROGRESS
        assert remote.upsert_calls == ["tasks"]
        assert remote.fetch_calls == list(SYNC_COLLECTIONS)
        assert not signed_in.sync_engine.in_progress


class TestStatusSignal:
    def test_transitions_published(self, signed_in, remote):
        states = []
        signed_in.events.subscribe(EventType.SYNC_STATUS_CHANGED, lambda e: states.append(e["data"]["state"]))
        run(signed_in.sync_engine.sync_all())
        remote.fail_on[("fetch", "checkins")] = RemoteUnreachable("offline")
        run(signed_in.sync_engine.sync_all())
        assert states == ["syncing", "ok", "syncing", "error"]


class TestScheduler:
    def test_sync_now_message(self, signed_in):
        response = run(signed_in.scheduler.sync_now())
        assert response.message == "Sync complete"
        assert response.result.ok

    def test_sync_now_not_configured(self, container):
        response = run(container.scheduler.sync_now())
        assert response.message == "Remote sync is not configured"

    def test_back_online_triggers_sync(self, signed_in, remote):
        assert run(signed_in.scheduler.set_online(False)) is None
        assert remote.fetch_calls == []
        result = run(signed_in.scheduler.set_online(True))
        assert result.outcome == SyncOutcome.OK
        assert run(signed_in.scheduler.set_online(True)) is None

    def test_periodic_and_change_triggers(self, signed_in, remote):
        async def scenario():
            scheduler = signed_in.scheduler
            scheduler.interval = 0.01
            await scheduler.start()
            await asyncio.sleep(0.05)
            periodic_fetches = len(remote.fetch_calls)
            await signed_in.tasks.create({"title": "a"})
            await asyncio.sleep(0.05)
            await scheduler.stop()
            return periodic_fetches

        periodic_fetches = run(scenario())
        assert periodic_fetches >= len(SYNC_COLLECTIONS)
        assert "tasks" in remote.upsert_calls


class TestLastWriteWins:
    def test_missing_local_timestamp_counts_as_earliest(self):
        assert remote_is_newer({"updated_at": "2000-01-01T00:00:00Z"}, {"id": "x"})

    def test_absent_locally(self):
        assert remote_is_newer({"id": "x"}, None)

    def test_strictly_greater(self):
        local = {"updated_at": "2024-06-01T00:00:00.000Z"}
        assert not remote_is_newer({"updated_at": "2024-06-01T00:00:00Z"}, local)
        assert remote_is_newer({"updated_at": "2024-06-01T00:00:00.001Z"}, local)
