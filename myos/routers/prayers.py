# myos/routers/prayers.py
from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List, Optional

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.prayer import PrayerCreate, PrayerUpdate, PrayerLogIncrement, PrayerDay

router = APIRouter(
    prefix="/prayers",
    tags=["prayers"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[PrayerDay])
async def list_prayers(
    date: Optional[str] = Query(None, description="YYYY-MM-DD, today if omitted"),
    c: AppContainer = Depends(get_container),
):
    """Live prayers with their count for one day."""
    try:
        return await c.prayer_logs.today(await c.prayers.list_sorted(), date)
    except MyOSError as e:
        raise http_error(e)


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_prayer(prayer_data: PrayerCreate, c: AppContainer = Depends(get_container)):
    try:
        record = await c.prayers.create(prayer_data)
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.get("/{prayer_id}", response_model=Dict[str, Any])
async def get_prayer(prayer_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.prayers.get_live(prayer_id)
    except MyOSError as e:
        raise http_error(e)


@router.patch("/{prayer_id}", response_model=Dict[str, Any])
async def update_prayer(prayer_id: str, prayer_data: PrayerUpdate, c: AppContainer = Depends(get_container)):
    try:
        record = await c.prayers.update(prayer_id, prayer_data.model_dump(exclude_unset=True))
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.delete("/{prayer_id}", response_model=Dict[str, Any])
async def delete_prayer(prayer_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.prayers.soft_delete(prayer_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/{prayer_id}/restore", response_model=Dict[str, Any])
async def restore_prayer(prayer_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.prayers.restore(prayer_id)
    except MyOSError as e:
        raise http_error(e)


# ========================================
# PRAYER LOGS
# ========================================

@router.post("/{prayer_id}/increment", response_model=Dict[str, Any])
async def increment_prayer(
    prayer_id: str,
    log_data: Optional[PrayerLogIncrement] = None,
    c: AppContainer = Depends(get_container),
):
    """Count one more prayer for a day (today by default)."""
    try:
        return await c.prayer_logs.increment(prayer_id, log_data.date if log_data else None)
    except MyOSError as e:
        raise http_error(e)


@router.get("/{prayer_id}/history", response_model=List[Dict[str, Any]])
async def prayer_history(prayer_id: str, c: AppContainer = Depends(get_container)):
    try:
        await c.prayers.get_live(prayer_id)
        return await c.prayer_logs.history(prayer_id)
    except MyOSError as e:
        raise http_error(e)
