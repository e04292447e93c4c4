import asyncio
import copy
import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, create_engine
from sqlmodel.pool import StaticPool
from datetime import datetime, timedelta, timezone

from myos.main import app
from myos.core.deps import AppContainer, get_container
from myos.database.store import LocalStore
from myos.services.remote import AUTH_SESSION_KEY, SUPABASE_KEY_KEY, SUPABASE_URL_KEY

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def run(coro):
    return asyncio.run(coro)


class FrozenClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeRemote:
    """In-memory stand-in for the remote tables, keyed by collection then id."""

    def __init__(self):
        self.tables = {}
        self.upsert_calls = []
        self.fetch_calls = []
        self.fail_on = {}
        self.on_upsert = None

    def rows(self, collection):
        return self.tables.setdefault(collection, {})

    async def upsert(self, collection, records):
        self.upsert_calls.append(collection)
        if self.fail_on.get(("upsert", collection)):
            raise self.fail_on[("upsert", collection)]
        for record in records:
            self.rows(collection)[record["id"]] = copy.deepcopy(record)
        if self.on_upsert:
            await self.on_upsert(collection)

    async def fetch_all(self, collection):
        self.fetch_calls.append(collection)
        if self.fail_on.get(("fetch", collection)):
            raise self.fail_on[("fetch", collection)]
        return [copy.deepcopy(r) for r in self.rows(collection).values()]


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="store")
def store_fixture(engine):
    return LocalStore(engine)


@pytest.fixture(name="clock")
def clock_fixture():
    return FrozenClock()


@pytest.fixture(name="remote")
def remote_fixture():
    return FakeRemote()


@pytest.fixture(name="container")
def container_fixture(engine, clock, remote):
    return AppContainer(engine, remote_factory=lambda config, identity: remote, clock=clock)


@pytest.fixture(name="signed_in")
def signed_in_fixture(container):
    """Configure the remote endpoint and a signed-in session."""
    async def configure():
        await container.store.set_config(SUPABASE_URL_KEY, "https://example.supabase.co")
        await container.store.set_config(SUPABASE_KEY_KEY, "anon-key")
        await container.store.set_config(AUTH_SESSION_KEY, {"user_id": "user-1", "access_token": "token"})
    run(configure())
    return container


@pytest.fixture(name="client")
def client_fixture(container):
    app.dependency_overrides[get_container] = lambda: container
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
