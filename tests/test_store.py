import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from myos.core.exceptions import StorageUnavailable, ValidationError
from myos.database.store import LocalStore

from conftest import run


class TestRecords:
    def test_put_then_get(self, store):
        record = {"id": "t1", "title": "Buy milk", "updated_at": "2024-06-15T12:00:00.000Z"}
        run(store.put("tasks", record))
        assert run(store.get("tasks", "t1")) == record

    def test_put_replaces_by_id(self, store):
        run(store.put("tasks", {"id": "t1", "title": "a"}))
        run(store.put("tasks", {"id": "t1", "title": "b"}))
        assert run(store.get("tasks", "t1"))["title"] == "b"
        assert len(run(store.get_all("tasks"))) == 1

    def test_collections_are_isolated(self, store):
        run(store.put("tasks", {"id": "same"}))
        assert run(store.get("habits", "same")) is None

    def test_get_live_excludes_tombstones(self, store):
        run(store.put("tasks", {"id": "a", "deleted_at": None}))
        run(store.put("tasks", {"id": "b", "deleted_at": "2024-06-15T12:00:00.000Z"}))
        assert [r["id"] for r in run(store.get_live("tasks"))] == ["a"]
        assert len(run(store.get_all("tasks"))) == 2

    def test_returned_records_are_copies(self, store):
        run(store.put("tasks", {"id": "a", "labels": ["x"]}))
        record = run(store.get("tasks", "a"))
        record["labels"].append("y")
        assert run(store.get("tasks", "a"))["labels"] == ["x"]

    def test_unknown_fields_round_trip(self, store):
        record = {"id": "a", "extra": {"nested": [1, 2]}}
        run(store.put("checkins", record))
        assert run(store.get("checkins", "a"))["extra"] == {"nested": [1, 2]}

    def test_delete(self, store):
        run(store.put("tasks", {"id": "a"}))
        assert run(store.delete("tasks", "a")) is True
        assert run(store.delete("tasks", "a")) is False
        assert run(store.get("tasks", "a")) is None

    def test_missing_id_rejected(self, store):
        with pytest.raises(ValidationError):
            run(store.put("tasks", {"title": "no id"}))

    def test_unknown_collection_rejected(self, store):
        with pytest.raises(ValidationError):
            run(store.get_all("nope"))

    def test_clear_all(self, store):
        run(store.put("tasks", {"id": "a"}))
        run(store.set_config("last_sync", "x"))
        run(store.clear_all())
        assert run(store.get_all("tasks")) == []
        assert run(store.get_config("last_sync")) is None


class TestConfig:
    def test_missing_key_is_none(self, store):
        assert run(store.get_config("supabase_url")) is None

    def test_set_and_overwrite(self, store):
        run(store.set_config("auth_session", {"user_id": "u", "access_token": "t"}))
        assert run(store.get_config("auth_session")) == {"user_id": "u", "access_token": "t"}
        run(store.set_config("auth_session", None))
        assert run(store.get_config("auth_session")) is None


class TestFailures:
    def test_database_errors_become_storage_unavailable(self, engine, monkeypatch):
        store = LocalStore(engine)

        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr("myos.database.store.Session.get", broken)
        with pytest.raises(StorageUnavailable):
            run(store.get("tasks", "a"))


class TestResponsiveness:
    def test_other_tasks_run_during_store_work(self, store):
        async def scenario():
            steps = 0
            done = asyncio.Event()

            async def ticker():
                nonlocal steps
                while not done.is_set():
                    steps += 1
                    await asyncio.sleep(0)

            ticking = asyncio.create_task(ticker())
            for i in range(50):
                await store.put("tasks", {"id": f"t{i}"})
            records = await store.get_all("tasks")
            done.set()
            await ticking
            return steps, records

        steps, records = run(scenario())
        assert len(records) == 50
        assert steps > 0
