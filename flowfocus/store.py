"""
In-memory task store.

The store is the single owner of canonical Task records for a session.
It is purely synchronous and never talks to the gateway; the mutation
coordinator is its only writer.
"""
import logging
from typing import Iterable, Iterator, List, Optional

from .schema import Task, TaskId

logger = logging.getLogger(__name__)


class TaskStore:
    """Ordered, id-unique collection of tasks."""

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: List[Task] = []
        self.reset(tasks)

    def list(self) -> List[Task]:
        """All tasks in store order (a copy; the records themselves are shared)."""
        return list(self._tasks)

    def get(self, task_id: TaskId) -> Optional[Task]:
        index = self._index_of(task_id)
        return None if index is None else self._tasks[index]

    def add(self, task: Task) -> None:
        """Append a task. Raises ValueError if its id is already present."""
        if self._index_of(task.id) is not None:
            raise ValueError(f"Duplicate task id: {task.id!r}")
        self._tasks.append(task)

    def replace(self, task_id: TaskId, task: Task) -> None:
        """Swap the record for ``task_id`` in place. Unknown ids are ignored."""
        if task.id != task_id:
            raise ValueError(f"Replacement for {task_id!r} carries id {task.id!r}")
        index = self._index_of(task_id)
        if index is None:
            logger.debug(f"replace: task {task_id!r} not in store, ignoring")
            return
        self._tasks[index] = task

    def remove(self, task_id: TaskId) -> None:
        """Remove the record for ``task_id``. Unknown ids are ignored."""
        index = self._index_of(task_id)
        if index is None:
            logger.debug(f"remove: task {task_id!r} not in store, ignoring")
            return
        del self._tasks[index]

    def reset(self, tasks: Iterable[Task]) -> None:
        """Replace the whole collection. Raises ValueError on duplicate ids."""
        tasks = list(tasks)
        seen = set()
        for task in tasks:
            if task.id in seen:
                raise ValueError(f"Duplicate task id: {task.id!r}")
            seen.add(task.id)
        self._tasks = tasks

    def _index_of(self, task_id: TaskId) -> Optional[int]:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return None

    def __contains__(self, task_id) -> bool:
        return self._index_of(task_id) is not None

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))
