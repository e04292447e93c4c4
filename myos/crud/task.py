# myos/crud/task.py
from typing import List, Optional
from datetime import datetime

from myos.crud.base import RecordCRUD, Record
from myos.core.timestamps import parse_timestamp_or_none, EPOCH
from myos.schemas.action_log import ActionType
from myos.schemas.task import Task, TaskCreate, TaskUpdate, TaskStatus, TaskSummary
from myos.services import status_engine


class TaskCRUD(RecordCRUD):
    collection = "tasks"
    entity_model = Task
    create_model = TaskCreate
    update_model = TaskUpdate

    def _fields_for_create(self, payload: TaskCreate) -> Record:
        fields = super()._fields_for_create(payload)
        fields["status"] = TaskStatus.OPEN.value
        fields["completed_at"] = None
        return fields

    async def complete(self, task_id: str) -> Record:
        completed_at = self._now_iso()

        def apply(r: Record) -> None:
            r["status"] = TaskStatus.DONE.value
            r["completed_at"] = completed_at

        return await self._mutate(task_id, ActionType.COMPLETE, apply)

    async def reopen(self, task_id: str) -> Record:
        def apply(r: Record) -> None:
            r["status"] = TaskStatus.OPEN.value
            r["completed_at"] = None

        return await self._mutate(task_id, ActionType.REOPEN, apply)

    def _summary(self, task: Record, now: datetime) -> TaskSummary:
        return TaskSummary(
            task=task,
            days_open=status_engine.days_open(task, now),
            is_overdue=status_engine.is_overdue(task, now),
        )

    async def list_open(self, now: Optional[datetime] = None, limit: Optional[int] = None) -> List[TaskSummary]:
        """Open tasks: overdue first, then oldest first."""
        now = now or self.clock()
        tasks = [t for t in await self.list_live() if t.get("status") != TaskStatus.DONE.value]
        tasks.sort(key=lambda t: (
            0 if status_engine.is_overdue(t, now) else 1,
            parse_timestamp_or_none(t.get("created_at")) or EPOCH,
        ))
        if limit is not None:
            tasks = tasks[:limit]
        return [self._summary(t, now) for t in tasks]

    async def list_done(self, now: Optional[datetime] = None) -> List[TaskSummary]:
        """Completed tasks, most recently completed first."""
        now = now or self.clock()
        tasks = [t for t in await self.list_live() if t.get("status") == TaskStatus.DONE.value]
        tasks.sort(
            key=lambda t: parse_timestamp_or_none(t.get("completed_at")) or EPOCH,
            reverse=True,
        )
        return [self._summary(t, now) for t in tasks]
