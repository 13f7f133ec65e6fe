"""
Task mutation coordinator.

Every create/update/delete goes through here:

  validate → dispatch to gateway (await) → reconcile store → notify once

Failures of any kind from the gateway are caught at this boundary and turned
into exactly one failure notification; the store is never partially updated.

Updates are optimistic for display only: while an update is in flight its
changes are layered over the confirmed record in preview(), but the store
keeps the confirmed record until the gateway answers. A failed update drops
only its own layer, which reverts its part of the view.

Same-task concurrency:
    Completions may arrive out of order. With UpdatePolicy.LAST_RESPONSE_WINS
    the last gateway response to arrive is applied, even if it answers an
    older request. UpdatePolicy.LATEST_REQUEST_WINS tags each update with a
    per-task sequence number and discards a response older than one already
    applied.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .drag import StatusChange
from .errors import GatewayError, NotFoundError, TaskBoardError
from .gateway import TaskGateway
from .notify import NotificationKind, NotificationSink, message_for
from .schema import (
    Task, TaskDraft, TaskId, TaskPriority, TaskStatus,
    utc_now, validate_changes, validate_tags, validate_title,
)
from . import dates
from .store import TaskStore

logger = logging.getLogger(__name__)


class UpdatePolicy(str, Enum):
    LAST_RESPONSE_WINS = "last_response_wins"
    LATEST_REQUEST_WINS = "latest_request_wins"


@dataclass(frozen=True)
class _Pending:
    """One in-flight update: its sequence number and validated fields."""
    seq: int
    fields: Dict[str, Any]


class TaskMutationCoordinator:
    """Single writer of the task store."""

    def __init__(
        self,
        store: TaskStore,
        gateway: TaskGateway,
        notifier: NotificationSink,
        policy: UpdatePolicy = UpdatePolicy.LAST_RESPONSE_WINS,
        clock=utc_now,
    ):
        self.store = store
        self.gateway = gateway
        self.notifier = notifier
        self.policy = UpdatePolicy(policy)
        self._clock = clock
        self._issued: Dict[TaskId, int] = {}   # last sequence number handed out
        self._applied: Dict[TaskId, int] = {}  # last sequence number written to the store
        self._pending: Dict[TaskId, List[_Pending]] = {}  # in seq order

    # ── Outcome reporting ────────────────────────────────────

    def _succeeded(self, operation: str) -> None:
        self.notifier.notify(NotificationKind.SUCCESS, message_for(operation, NotificationKind.SUCCESS))

    def _failed(self, operation: str, error: Exception) -> None:
        logger.error(f"{operation} failed: {error}")
        self.notifier.notify(NotificationKind.FAILURE, message_for(operation, NotificationKind.FAILURE))

    # ── Load ─────────────────────────────────────────────────

    async def load(self) -> bool:
        """Replace the store with the gateway's task list. Only failures are reported."""
        try:
            tasks = await self.gateway.list()
            try:
                self.store.reset(tasks)
            except ValueError as e:
                raise GatewayError(str(e)) from e
        except TaskBoardError as e:
            self._failed("loaded", e)
            return False
        self._issued.clear()
        self._applied.clear()
        self._pending.clear()
        logger.info(f"Loaded {len(self.store)} tasks")
        return True

    # ── Create ───────────────────────────────────────────────

    async def create(
        self,
        title: str,
        description: str = "",
        status=TaskStatus.TODO,
        priority=TaskPriority.MEDIUM,
        due_date=None,
        tags: Sequence[str] = (),
    ) -> Optional[Task]:
        """
        Create a task. It only enters the store once the gateway has assigned
        an id, since ids are not unique until then.
        """
        try:
            now = self._clock()
            draft = TaskDraft(
                title=validate_title(title),
                description=description or "",
                status=TaskStatus.parse(status),
                priority=TaskPriority.parse(priority),
                due_date=dates.parse_due_date(due_date),
                tags=validate_tags(tags),
                created_at=now,
                updated_at=now,
            )
            task = await self.gateway.create(draft)
            if task.id in self.store:
                raise GatewayError(f"Gateway returned duplicate id {task.id!r}")
        except TaskBoardError as e:
            self._failed("created", e)
            return None

        self.store.add(task)
        logger.info(f"Task {task.id!r} created in {task.status.value}")
        self._succeeded("created")
        return task

    # ── Update ───────────────────────────────────────────────

    async def update(self, task_id: TaskId, changes: Mapping[str, Any]) -> Optional[Task]:
        """Apply a partial change. Returns the confirmed record, or None on failure."""
        seq = None
        try:
            fields = validate_changes(changes, task_id=task_id)
            current = self.store.get(task_id)
            if current is None:
                raise NotFoundError(task_id)
            fields["updated_at"] = max(self._clock(), current.updated_at)

            seq = self._issued.get(task_id, 0) + 1
            self._issued[task_id] = seq
            self._pending.setdefault(task_id, []).append(_Pending(seq, dict(fields)))

            updated = await self.gateway.update(task_id, fields)
            if updated.id != task_id:
                raise GatewayError(f"Gateway answered update of {task_id!r} with task {updated.id!r}")
        except TaskBoardError as e:
            self._failed("updated", e)
            return None
        finally:
            if seq is not None:
                self._clear_pending(task_id, seq)

        if (self.policy == UpdatePolicy.LATEST_REQUEST_WINS
                and seq < self._applied.get(task_id, 0)):
            logger.info(f"Discarding stale response #{seq} for task {task_id!r}")
            self._succeeded("updated")
            return self.store.get(task_id)

        if task_id not in self.store:
            # deleted while the update was in flight; do not resurrect
            logger.info(f"Task {task_id!r} was removed before its update completed")
            self._succeeded("updated")
            return updated

        self.store.replace(task_id, updated)
        self._applied[task_id] = max(seq, self._applied.get(task_id, 0))
        self._succeeded("updated")
        return updated

    async def apply(self, command: StatusChange) -> Optional[Task]:
        """Run a drag-drop or toggle-complete command through update()."""
        return await self.update(command.task_id, command.as_changes())

    # ── Delete ───────────────────────────────────────────────

    async def delete(self, task_id: TaskId) -> bool:
        try:
            if task_id not in self.store:
                raise NotFoundError(task_id)
            await self.gateway.delete(task_id)
        except TaskBoardError as e:
            self._failed("deleted", e)
            return False

        self.store.remove(task_id)
        self._pending.pop(task_id, None)
        logger.info(f"Task {task_id!r} deleted")
        self._succeeded("deleted")
        return True

    # ── Optimistic view ──────────────────────────────────────

    def _clear_pending(self, task_id: TaskId, seq: int) -> None:
        """Drop only the layer for ``seq``; other in-flight edits stay visible."""
        layers = [p for p in self._pending.get(task_id, ()) if p.seq != seq]
        if layers:
            self._pending[task_id] = layers
        else:
            self._pending.pop(task_id, None)

    def _overlay(self, task: Task) -> Task:
        for layer in self._pending.get(task.id, ()):
            task = task.with_changes(**layer.fields)
        return task

    def pending(self, task_id: TaskId) -> Optional[Task]:
        """
        The optimistic record while updates are in flight, if any.

        In-flight edits are layered in request order on top of the
        confirmed record, so concurrent edits to different fields all show.
        """
        current = self.store.get(task_id)
        if current is None or task_id not in self._pending:
            return None
        return self._overlay(current)

    def current(self, task_id: TaskId) -> Optional[Task]:
        """The record as displayed: pending edits if any, else the stored one."""
        return self.pending(task_id) or self.store.get(task_id)

    @property
    def in_flight(self) -> List[TaskId]:
        return list(self._pending)

    def preview(self, tasks: Iterable[Task]) -> List[Task]:
        """Overlay in-flight edits on ``tasks`` (store order kept)."""
        return [self._overlay(task) for task in tasks]

    def last_applied(self, task_id: TaskId) -> int:
        return self._applied.get(task_id, 0)
