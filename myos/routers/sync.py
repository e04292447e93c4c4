# myos/routers/sync.py
"""
Sync router: manual sync, status signal and connectivity changes.
"""
from fastapi import APIRouter, Depends

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.sync import ConnectivityUpdate, SyncNowResponse, SyncStatusResponse

router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post("/now", response_model=SyncNowResponse)
async def sync_now(c: AppContainer = Depends(get_container)):
    """Run a sync cycle and report how it went. Never fails with a remote error."""
    return await c.scheduler.sync_now()


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(c: AppContainer = Depends(get_container)):
    try:
        return await c.sync_engine.status()
    except MyOSError as e:
        raise http_error(e)


@router.post("/connectivity", response_model=SyncStatusResponse)
async def set_connectivity(update: ConnectivityUpdate, c: AppContainer = Depends(get_container)):
    """Report online/offline. Going back online starts a sync."""
    await c.scheduler.set_online(update.online)
    try:
        return await c.sync_engine.status()
    except MyOSError as e:
        raise http_error(e)
