"""
Persistence gateway contract and an in-memory implementation.

The board only depends on the TaskGateway protocol:

    list()                 → list[Task]              GatewayError
    create(draft)          → Task (id assigned)      ValidationError | GatewayError
    update(id, fields)     → Task (full record)      NotFoundError | GatewayError
    delete(id)             → None                    NotFoundError | GatewayError

Every call is a suspension point; nothing else in the board awaits.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Mapping, Protocol

from .errors import NotFoundError, ValidationError
from .schema import Task, TaskDraft, TaskId

logger = logging.getLogger(__name__)


class TaskGateway(Protocol):
    async def list(self) -> List[Task]:
        ...

    async def create(self, draft: TaskDraft) -> Task:
        ...

    async def update(self, task_id: TaskId, fields: Mapping[str, Any]) -> Task:
        ...

    async def delete(self, task_id: TaskId) -> None:
        ...


class InMemoryTaskGateway:
    """
    Dict-backed gateway with sequential integer ids.

    ``latency`` (seconds) is awaited before every call to mimic a remote
    service; 0 still yields to the event loop once.
    """

    def __init__(self, tasks: Iterable[Task] = (), latency: float = 0.0):
        self.latency = latency
        self._tasks: Dict[TaskId, Task] = {}
        for task in tasks:
            self._tasks[task.id] = task

    async def _delay(self) -> None:
        await asyncio.sleep(self.latency)

    def _next_id(self) -> int:
        numeric = [tid for tid in self._tasks if isinstance(tid, int)]
        return max(numeric, default=0) + 1

    async def list(self) -> List[Task]:
        await self._delay()
        return list(self._tasks.values())

    async def get(self, task_id: TaskId) -> Task:
        await self._delay()
        if task_id not in self._tasks:
            raise NotFoundError(task_id)
        return self._tasks[task_id]

    async def create(self, draft: TaskDraft) -> Task:
        await self._delay()
        if not draft.title.strip():
            raise ValidationError("Title must not be empty")
        task = Task.from_draft(self._next_id(), draft)
        self._tasks[task.id] = task
        logger.debug(f"Created task {task.id}")
        return task

    async def update(self, task_id: TaskId, fields: Mapping[str, Any]) -> Task:
        await self._delay()
        current = self._tasks.get(task_id)
        if current is None:
            raise NotFoundError(task_id)
        updated = current.with_changes(**dict(fields))
        self._tasks[task_id] = updated
        return updated

    async def delete(self, task_id: TaskId) -> None:
        await self._delay()
        if task_id not in self._tasks:
            raise NotFoundError(task_id)
        del self._tasks[task_id]
