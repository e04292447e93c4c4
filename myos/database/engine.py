from sqlmodel import create_engine, SQLModel
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from typing import Optional

from myos.core.config import settings

# Import table models so they are registered on SQLModel.metadata
from myos.models import store as _store_models  # noqa: F401

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create the engine for the embedded store (SQLite by default)."""
    url = database_url or settings.DATABASE_URL
    kwargs = {"echo": settings.DEBUG if echo is None else echo}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in IN_MEMORY_URLS:
            # A single shared connection keeps the in-memory database alive
            kwargs["poolclass"] = StaticPool

    return create_engine(url, **kwargs)


engine = build_engine()


def create_db_and_tables(bind: Optional[Engine] = None) -> None:
    SQLModel.metadata.create_all(bind or engine)
