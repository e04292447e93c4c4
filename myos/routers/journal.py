# myos/routers/journal.py
from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List, Optional

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.common import MessageResponse
from myos.schemas.journal import JournalEntryCreate, JournalEntryUpdate, JournalSave

router = APIRouter(
    prefix="/journal",
    tags=["journal"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[Dict[str, Any]])
async def list_entries(
    limit: Optional[int] = Query(None, ge=1),
    c: AppContainer = Depends(get_container),
):
    """Live journal entries, newest day first."""
    try:
        return await c.journal.list_recent(limit)
    except MyOSError as e:
        raise http_error(e)


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_entry(entry_data: JournalEntryCreate, c: AppContainer = Depends(get_container)):
    try:
        return await c.journal.create(entry_data)
    except MyOSError as e:
        raise http_error(e)


@router.put("/save")
async def save_entry(entry_data: JournalSave, c: AppContainer = Depends(get_container)):
    """Editor save: create or update the entry for a day."""
    try:
        entry = await c.journal.save_for_date(entry_data)
        if entry is None:
            return MessageResponse(message="Nothing to save")
        return entry
    except MyOSError as e:
        raise http_error(e)


@router.get("/date/{date}", response_model=Optional[Dict[str, Any]])
async def entry_for_date(date: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.journal.entry_for_date(date)
    except MyOSError as e:
        raise http_error(e)


@router.get("/{entry_id}", response_model=Dict[str, Any])
async def get_entry(entry_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.journal.get_live(entry_id)
    except MyOSError as e:
        raise http_error(e)


@router.patch("/{entry_id}", response_model=Dict[str, Any])
async def update_entry(entry_id: str, entry_data: JournalEntryUpdate, c: AppContainer = Depends(get_container)):
    try:
        return await c.journal.update(entry_id, entry_data.model_dump(exclude_unset=True))
    except MyOSError as e:
        raise http_error(e)


@router.delete("/{entry_id}", response_model=Dict[str, Any])
async def delete_entry(entry_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.journal.soft_delete(entry_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/{entry_id}/restore", response_model=Dict[str, Any])
async def restore_entry(entry_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.journal.restore(entry_id)
    except MyOSError as e:
        raise http_error(e)
