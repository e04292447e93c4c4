"""
Embedded local store: the single source of truth for the UI.

Durable CRUD over named collections keyed by id, plus a reserved key/value
config collection. The store never stamps timestamps; callers set
``updated_at`` before calling ``put``.
"""

import asyncio
import copy
import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import delete
from sqlmodel import Session, select

from myos.core.exceptions import StorageUnavailable, ValidationError
from myos.models.store import COLLECTIONS, ConfigEntry, StoredRecord

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
T = TypeVar("T")


class LocalStore:
    """
    Async facade over the embedded database.

    Each operation opens its own session and commits before returning, so a
    completed ``put`` is durable and visible to the next read. Atomicity is
    per record; there are no cross-record transactions.

    Session work runs on a worker thread so a long scan or a burst of merge
    writes never stalls the event loop. Calls are serialized because SQLite
    allows one writer and the in-memory engine shares a single connection.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._lock = threading.Lock()

    def _locked(self, fn: Callable[..., T], *args: Any) -> T:
        with self._lock:
            return fn(*args)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(self._locked, fn, *args)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Local store operation failed: {e}")
            raise StorageUnavailable(f"Local store unavailable: {e}") from e

    @staticmethod
    def _check_collection(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise ValidationError(f"Unknown collection: {collection}", field="collection")

    @staticmethod
    def _to_payload(record: Record) -> Record:
        try:
            json.dumps(record)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Record is not JSON serialisable: {e}")
        return copy.deepcopy(dict(record))

    # ===========================
    # Records
    # ===========================

    def _select_all(self, collection: str) -> List[Record]:
        with self._session() as session:
            rows = session.exec(
                select(StoredRecord)
                .where(StoredRecord.collection == collection)
                .order_by(StoredRecord.id)
            ).all()
            return [dict(row.payload) for row in rows]

    def _select_one(self, collection: str, record_id: str) -> Optional[Record]:
        with self._session() as session:
            row = session.get(StoredRecord, (collection, record_id))
            return dict(row.payload) if row else None

    def _write(self, collection: str, record_id: str, payload: Record) -> None:
        with self._session() as session:
            row = session.get(StoredRecord, (collection, record_id))
            if row:
                row.payload = payload
                row.written_at = datetime.now(timezone.utc)
            else:
                row = StoredRecord(collection=collection, id=record_id, payload=payload)
            session.add(row)
            session.commit()

    def _remove(self, collection: str, record_id: str) -> bool:
        with self._session() as session:
            row = session.get(StoredRecord, (collection, record_id))
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def _wipe(self) -> None:
        with self._session() as session:
            session.execute(delete(StoredRecord))
            session.execute(delete(ConfigEntry))
            session.commit()

    async def get_all(self, collection: str) -> List[Record]:
        """Full scan of a collection, tombstones included."""
        self._check_collection(collection)
        return await self._run(self._select_all, collection)

    async def get_live(self, collection: str) -> List[Record]:
        """All records that are not soft-deleted."""
        records = await self.get_all(collection)
        return [r for r in records if not r.get("deleted_at")]

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        self._check_collection(collection)
        return await self._run(self._select_one, collection, record_id)

    async def put(self, collection: str, record: Record) -> Record:
        """Insert or replace a record by its ``id``."""
        self._check_collection(collection)
        record_id = record.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise ValidationError("Record id must be a non-empty string", field="id")

        payload = self._to_payload(record)
        await self._run(self._write, collection, record_id, payload)
        return copy.deepcopy(payload)

    async def delete(self, collection: str, record_id: str) -> bool:
        """
        Physically remove a record.

        Maintenance only: domain flows soft-delete through ``put`` so the
        tombstone can still replicate.
        """
        self._check_collection(collection)
        return await self._run(self._remove, collection, record_id)

    async def clear_all(self) -> None:
        """Wipe every collection and the config (development/reset)."""
        await self._run(self._wipe)
        logger.warning("Local store cleared")

    # ===========================
    # Config
    # ===========================

    def _read_config(self, key: str) -> Optional[Any]:
        with self._session() as session:
            entry = session.get(ConfigEntry, key)
            return copy.deepcopy(entry.value) if entry else None

    def _write_config(self, key: str, payload: Any) -> None:
        with self._session() as session:
            entry = session.get(ConfigEntry, key)
            if entry:
                entry.value = payload
                entry.updated_at = datetime.now(timezone.utc)
            else:
                entry = ConfigEntry(key=key, value=payload)
            session.add(entry)
            session.commit()

    async def get_config(self, key: str) -> Optional[Any]:
        return await self._run(self._read_config, key)

    async def set_config(self, key: str, value: Any) -> None:
        payload = self._to_payload({"value": value})["value"]
        await self._run(self._write_config, key, payload)
