# myos/routers/checkins.py
from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List, Optional

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.checkin import CheckinCreate, CheckinUpdate, CheckinWithStatus
from myos.services.status_engine import Severity

router = APIRouter(
    prefix="/checkins",
    tags=["checkins"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[CheckinWithStatus])
async def list_checkins(
    severity: Optional[Severity] = Query(None, description="Only return check-ins in this band"),
    limit: Optional[int] = Query(None, ge=1),
    c: AppContainer = Depends(get_container),
):
    """List live check-ins, most urgent first."""
    try:
        return await c.checkins.list_with_status(severity=severity, limit=limit)
    except MyOSError as e:
        raise http_error(e)


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_checkin(checkin_data: CheckinCreate, c: AppContainer = Depends(get_container)):
    """Create a new recurring check-in."""
    try:
        record = await c.checkins.create(checkin_data)
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.get("/{checkin_id}", response_model=Dict[str, Any])
async def get_checkin(checkin_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.checkins.get_live(checkin_id)
    except MyOSError as e:
        raise http_error(e)


@router.patch("/{checkin_id}", response_model=Dict[str, Any])
async def update_checkin(checkin_id: str, checkin_data: CheckinUpdate, c: AppContainer = Depends(get_container)):
    try:
        record = await c.checkins.update(checkin_id, checkin_data.model_dump(exclude_unset=True))
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.post("/{checkin_id}/checkin", response_model=Dict[str, Any])
async def check_in(checkin_id: str, c: AppContainer = Depends(get_container)):
    """Record that the check-in was done now."""
    try:
        return await c.checkins.check_in(checkin_id)
    except MyOSError as e:
        raise http_error(e)


@router.delete("/{checkin_id}", response_model=Dict[str, Any])
async def delete_checkin(checkin_id: str, c: AppContainer = Depends(get_container)):
    """Soft-delete a check-in. Can be undone for a few seconds via /actions/undo."""
    try:
        return await c.checkins.soft_delete(checkin_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/{checkin_id}/restore", response_model=Dict[str, Any])
async def restore_checkin(checkin_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.checkins.restore(checkin_id)
    except MyOSError as e:
        raise http_error(e)
