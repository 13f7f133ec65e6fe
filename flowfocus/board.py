"""
Board facade.

Owns one task store, one mutation coordinator and one drag controller,
plus the current search text and filter selectors. Views are recomputed on
demand from the store, so they always reflect the latest confirmed state
(with in-flight edits overlaid).
"""
import logging
from datetime import date
from typing import Any, Mapping, Optional, Sequence, Tuple

from .columns import ColumnGrouping
from .config import BoardConfig
from .coordinator import TaskMutationCoordinator, UpdatePolicy
from .drag import DragController, toggle_complete
from .gateway import TaskGateway
from .notify import CollectingNotifier, NotificationSink
from .projector import BoardFilter, coerce_priority_filter, coerce_status_filter
from .schema import Task, TaskId, TaskPriority, TaskStatus
from .stats import BoardStats, compute_stats
from .store import TaskStore

logger = logging.getLogger(__name__)


class TaskBoard:
    """The Kanban board: filters, columns, drag-and-drop and mutations."""

    def __init__(
        self,
        gateway: TaskGateway,
        notifier: Optional[NotificationSink] = None,
        config: Optional[BoardConfig] = None,
        policy: Optional[UpdatePolicy] = None,
    ):
        self.config = config or BoardConfig()
        self.notifier = notifier if notifier is not None else CollectingNotifier()
        self.store = TaskStore()
        self.coordinator = TaskMutationCoordinator(
            self.store,
            gateway,
            self.notifier,
            policy=policy or self.config.policy,
        )
        self.drag = DragController()
        self._filter = BoardFilter()

    # ── Filters ──────────────────────────────────────────────

    @property
    def filter(self) -> BoardFilter:
        return self._filter

    def set_search(self, term: str) -> None:
        self._filter = BoardFilter(term or "", self._filter.status, self._filter.priority)

    def set_status_filter(self, value) -> None:
        self._filter = BoardFilter(self._filter.search_term, coerce_status_filter(value), self._filter.priority)

    def set_priority_filter(self, value) -> None:
        self._filter = BoardFilter(self._filter.search_term, self._filter.status, coerce_priority_filter(value))

    def clear_filters(self) -> None:
        self._filter = BoardFilter()

    # ── Views ────────────────────────────────────────────────

    def visible_tasks(self):
        return self._filter.apply(self.coordinator.preview(self.store.list()))

    def columns(self) -> ColumnGrouping:
        return ColumnGrouping(self.visible_tasks())

    def count(self, status) -> int:
        return self.columns().count(status)

    def progress(self) -> Tuple[int, int]:
        """(completed, total) over the visible tasks, for the header bar."""
        grouping = self.columns()
        return grouping.count(TaskStatus.DONE), grouping.total

    def found_label(self) -> str:
        n = len(self.visible_tasks())
        return f"{n} task{'' if n == 1 else 's'} found"

    def stats(self, today: Optional[date] = None) -> BoardStats:
        """Dashboard numbers over every task, ignoring the board filters."""
        return compute_stats(self.store.list(), today)

    def get(self, task_id: TaskId) -> Optional[Task]:
        return self.store.get(task_id)

    # ── Mutations ────────────────────────────────────────────

    async def load(self) -> bool:
        return await self.coordinator.load()

    async def quick_add(self, column, title: str) -> Optional[Task]:
        """Column '+' form: blank titles are dropped without a gateway call."""
        if not title or not title.strip():
            logger.debug("Quick add ignored: empty title")
            return None
        return await self.coordinator.create(
            title.strip(),
            status=TaskStatus.parse(column),
            priority=TaskPriority.MEDIUM,
        )

    async def create(
        self,
        title: str,
        description: str = "",
        status=TaskStatus.TODO,
        priority=TaskPriority.MEDIUM,
        due_date=None,
        tags: Sequence[str] = (),
    ) -> Optional[Task]:
        return await self.coordinator.create(
            title, description=description, status=status,
            priority=priority, due_date=due_date, tags=tags,
        )

    async def save(self, task_id: TaskId, changes: Mapping[str, Any]) -> Optional[Task]:
        return await self.coordinator.update(task_id, changes)

    async def delete(self, task_id: TaskId) -> bool:
        return await self.coordinator.delete(task_id)

    async def toggle_complete(self, task_id: TaskId) -> Optional[Task]:
        # act on what the card shows, including edits still in flight
        task = self.coordinator.current(task_id)
        if task is None:
            # let the coordinator report the missing task
            return await self.coordinator.update(task_id, {})
        return await self.coordinator.apply(toggle_complete(task))

    # ── Drag and drop ────────────────────────────────────────

    def start_drag(self, task_id: TaskId) -> bool:
        task = self.coordinator.current(task_id)
        if task is None:
            logger.debug(f"Cannot drag unknown task {task_id!r}")
            return False
        self.drag.start(task)
        return True

    def drag_enter(self, column) -> None:
        self.drag.enter(column)

    def drag_leave(self) -> None:
        self.drag.leave()

    async def drop(self, column) -> Optional[Task]:
        """Drop onto ``column``; dispatches a status change when the column differs."""
        command = self.drag.drop(column)
        if command is None:
            return None
        return await self.coordinator.apply(command)

    def end_drag(self) -> None:
        self.drag.end()
