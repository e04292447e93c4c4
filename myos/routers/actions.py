# myos/routers/actions.py
from fastapi import APIRouter, Depends, Query
from typing import List

from myos.core.config import settings
from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.action_log import ActionLogEntry, UndoResponse

router = APIRouter(prefix="/actions", tags=["actions"])


@router.get("/", response_model=List[ActionLogEntry])
async def recent_actions(
    limit: int = Query(settings.ACTION_LOG_LIST_LIMIT, ge=1, le=500),
    c: AppContainer = Depends(get_container),
):
    """Most recent local actions, newest first."""
    try:
        return await c.action_log.recent(limit)
    except MyOSError as e:
        raise http_error(e)


@router.get("/entity/{entity_id}", response_model=List[ActionLogEntry])
async def entity_history(entity_id: str, c: AppContainer = Depends(get_container)):
    """Everything that happened to one record, oldest first."""
    try:
        return await c.action_log.history(entity_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/undo", response_model=UndoResponse)
async def undo(c: AppContainer = Depends(get_container)):
    """Undo the most recent destructive action if its window is still open."""
    try:
        message = await c.undo.undo()
    except MyOSError as e:
        raise http_error(e)
    if message is None:
        return UndoResponse(undone=False, message="Nothing to undo")
    return UndoResponse(undone=True, message=f"Undone: {message}")
