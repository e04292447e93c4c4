# myos/routers/habits.py
from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List, Optional

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.common import MessageResponse
from myos.schemas.habit import HabitCreate, HabitUpdate, HabitLogSet, HabitDay

router = APIRouter(
    prefix="/habits",
    tags=["habits"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[Dict[str, Any]])
async def list_habits(
    include_archived: bool = Query(False),
    c: AppContainer = Depends(get_container),
):
    try:
        if include_archived:
            return sorted(await c.habits.list_live(), key=lambda h: str(h.get("title", "")).lower())
        return await c.habits.list_active()
    except MyOSError as e:
        raise http_error(e)


@router.get("/day", response_model=List[HabitDay])
async def habits_for_day(
    date: Optional[str] = Query(None, description="YYYY-MM-DD, today if omitted"),
    c: AppContainer = Depends(get_container),
):
    """Active habits with their logged status for one day."""
    try:
        return await c.habit_logs.today(await c.habits.list_active(), date)
    except MyOSError as e:
        raise http_error(e)


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_habit(habit_data: HabitCreate, c: AppContainer = Depends(get_container)):
    try:
        record = await c.habits.create(habit_data)
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.get("/{habit_id}", response_model=Dict[str, Any])
async def get_habit(habit_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.habits.get_live(habit_id)
    except MyOSError as e:
        raise http_error(e)


@router.patch("/{habit_id}", response_model=Dict[str, Any])
async def update_habit(habit_id: str, habit_data: HabitUpdate, c: AppContainer = Depends(get_container)):
    try:
        record = await c.habits.update(habit_id, habit_data.model_dump(exclude_unset=True))
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.post("/{habit_id}/archive", response_model=Dict[str, Any])
async def archive_habit(habit_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.habits.archive(habit_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/{habit_id}/unarchive", response_model=Dict[str, Any])
async def unarchive_habit(habit_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.habits.unarchive(habit_id)
    except MyOSError as e:
        raise http_error(e)


@router.delete("/{habit_id}", response_model=Dict[str, Any])
async def delete_habit(habit_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.habits.soft_delete(habit_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/{habit_id}/restore", response_model=Dict[str, Any])
async def restore_habit(habit_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.habits.restore(habit_id)
    except MyOSError as e:
        raise http_error(e)


# ========================================
# HABIT LOGS
# ========================================

@router.put("/{habit_id}/log")
async def set_habit_log(habit_id: str, log_data: HabitLogSet, c: AppContainer = Depends(get_container)):
    """Set the outcome for a day; a null status clears it."""
    try:
        log = await c.habit_logs.set_status(habit_id, log_data)
        if log is None:
            return MessageResponse(message=f"Cleared {log_data.date}")
        return log
    except MyOSError as e:
        raise http_error(e)
