# myos/routers/settings.py
"""
Remote endpoint configuration and the signed-in session.

The sign-in flow itself runs outside this service; it hands over the
resulting user id and access token through ``PUT /settings/session``.
"""
import logging

from fastapi import APIRouter, Depends

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.common import MessageResponse
from myos.schemas.sync import AuthSession, RemoteConfigResponse, RemoteConfigUpdate
from myos.services.remote import (
    AUTH_SESSION_KEY, SUPABASE_KEY_KEY, SUPABASE_URL_KEY, load_identity, load_remote_config,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


async def _describe(c: AppContainer) -> RemoteConfigResponse:
    config = await load_remote_config(c.store)
    return RemoteConfigResponse(
        supabase_url=config.url if config else None,
        configured=config is not None,
        signed_in=await load_identity(c.store) is not None,
        last_sync=await c.sync_engine.last_sync(),
    )


@router.get("/remote", response_model=RemoteConfigResponse)
async def get_remote_config(c: AppContainer = Depends(get_container)):
    try:
        return await _describe(c)
    except MyOSError as e:
        raise http_error(e)


@router.put("/remote", response_model=RemoteConfigResponse)
async def set_remote_config(config: RemoteConfigUpdate, c: AppContainer = Depends(get_container)):
    try:
        await c.store.set_config(SUPABASE_URL_KEY, config.supabase_url)
        await c.store.set_config(SUPABASE_KEY_KEY, config.supabase_key)
        logger.info(f"Remote endpoint set to {config.supabase_url}")
        return await _describe(c)
    except MyOSError as e:
        raise http_error(e)


@router.put("/session", response_model=RemoteConfigResponse)
async def sign_in(session: AuthSession, c: AppContainer = Depends(get_container)):
    """Store the session produced by the external sign-in flow."""
    try:
        await c.store.set_config(AUTH_SESSION_KEY, session.model_dump())
        return await _describe(c)
    except MyOSError as e:
        raise http_error(e)


@router.delete("/session", response_model=MessageResponse)
async def sign_out(c: AppContainer = Depends(get_container)):
    try:
        await c.store.set_config(AUTH_SESSION_KEY, None)
        return MessageResponse(message="Signed out")
    except MyOSError as e:
        raise http_error(e)
