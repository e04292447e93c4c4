# myos/services/remote.py
"""
Remote backend adapter.

The sync engine only needs two calls per collection: a blind upsert keyed by
``id`` and a full fetch. ``SupabaseRemote`` implements them against a
PostgREST endpoint with httpx.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

import httpx

from myos.core.config import settings
from myos.core.exceptions import RemoteRejected, RemoteUnreachable
from myos.database.store import LocalStore

logger = logging.getLogger(__name__)

AUTH_SESSION_KEY = "auth_session"
SUPABASE_URL_KEY = "supabase_url"
SUPABASE_KEY_KEY = "supabase_key"


class RemoteBackend(Protocol):
    async def upsert(self, collection: str, records: List[Dict[str, Any]]) -> None:
        ...

    async def fetch_all(self, collection: str) -> List[Dict[str, Any]]:
        ...


@dataclass
class RemoteConfig:
    url: str
    key: str


@dataclass
class Identity:
    user_id: str
    access_token: str


async def load_remote_config(store: LocalStore) -> Optional[RemoteConfig]:
    """Remote endpoint from the config store, falling back to settings. None if incomplete."""
    url = await store.get_config(SUPABASE_URL_KEY) or settings.SUPABASE_URL
    key = await store.get_config(SUPABASE_KEY_KEY) or settings.SUPABASE_KEY
    if not url or not key:
        return None
    return RemoteConfig(url=str(url).rstrip("/"), key=str(key))


async def load_identity(store: LocalStore) -> Optional[Identity]:
    """Signed-in user from the stored auth session, or None."""
    session = await store.get_config(AUTH_SESSION_KEY)
    if not isinstance(session, dict):
        return None
    user_id = session.get("user_id")
    access_token = session.get("access_token")
    if not user_id or not access_token:
        return None
    return Identity(user_id=str(user_id), access_token=str(access_token))


class SupabaseRemote:
    """PostgREST client for the tables mirroring the local collections."""

    def __init__(
        self,
        url: str,
        key: str,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = f"{url.rstrip('/')}{settings.REMOTE_SCHEMA_PATH}"
        self.key = key
        self.access_token = access_token or key
        self.timeout = settings.REMOTE_TIMEOUT_SECONDS if timeout is None else timeout
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, collection: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}/{collection}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteUnreachable(f"Timed out contacting remote for {collection}: {e}")
        except httpx.TransportError as e:
            raise RemoteUnreachable(f"Could not reach remote for {collection}: {e}")

        if response.is_error:
            detail = response.text[:200]
            logger.warning(f"Remote rejected {method} {collection}: {response.status_code} {detail}")
            raise RemoteRejected(
                f"Remote rejected {method} {collection} ({response.status_code}): {detail}",
                status_code=response.status_code,
            )
        return response

    async def upsert(self, collection: str, records: List[Dict[str, Any]]) -> None:
        if not records:
            return
        await self._request(
            "POST",
            collection,
            params={"on_conflict": "id"},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            json=records,
        )

    async def fetch_all(self, collection: str) -> List[Dict[str, Any]]:
        response = await self._request("GET", collection, params={"select": "*"})
        try:
            rows = response.json()
        except ValueError as e:
            raise RemoteRejected(f"Remote returned invalid JSON for {collection}: {e}", status_code=response.status_code)
        if not isinstance(rows, list):
            raise RemoteRejected(f"Remote returned unexpected payload for {collection}", status_code=response.status_code)
        return [row for row in rows if isinstance(row, dict)]
