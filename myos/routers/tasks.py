# myos/routers/tasks.py
from fastapi import APIRouter, Depends, Query, status
from typing import Any, Dict, List

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.task import TaskCreate, TaskUpdate, TaskSummary

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[TaskSummary])
async def get_tasks(
    done: bool = Query(False, description="List completed tasks instead of open ones"),
    c: AppContainer = Depends(get_container),
):
    """Open tasks (overdue first, then oldest), or completed tasks."""
    try:
        if done:
            return await c.tasks.list_done()
        return await c.tasks.list_open()
    except MyOSError as e:
        raise http_error(e)


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_task(task_data: TaskCreate, c: AppContainer = Depends(get_container)):
    """Create a new task."""
    try:
        record = await c.tasks.create(task_data)
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.get("/{task_id}", response_model=Dict[str, Any])
async def get_task(task_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.tasks.get_live(task_id)
    except MyOSError as e:
        raise http_error(e)


@router.patch("/{task_id}", response_model=Dict[str, Any])
async def update_task(task_id: str, task_data: TaskUpdate, c: AppContainer = Depends(get_container)):
    try:
        record = await c.tasks.update(task_id, task_data.model_dump(exclude_unset=True))
        await c.labels.ensure_all(record.get("labels", []))
        return record
    except MyOSError as e:
        raise http_error(e)


@router.post("/{task_id}/complete", response_model=Dict[str, Any])
async def complete_task(task_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.tasks.complete(task_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/{task_id}/reopen", response_model=Dict[str, Any])
async def reopen_task(task_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.tasks.reopen(task_id)
    except MyOSError as e:
        raise http_error(e)


@router.delete("/{task_id}", response_model=Dict[str, Any])
async def delete_task(task_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.tasks.soft_delete(task_id)
    except MyOSError as e:
        raise http_error(e)


@router.post("/{task_id}/restore", response_model=Dict[str, Any])
async def restore_task(task_id: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.tasks.restore(task_id)
    except MyOSError as e:
        raise http_error(e)
