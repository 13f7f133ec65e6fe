"""
Drag-and-drop state machine.

States:
  IDLE      → no drag in progress
  DRAGGING  → a task is picked up, pointer is not over a column
  HOVERING  → a task is picked up and a column's drop zone is highlighted

Drop zones contain nested elements that fire their own enter/leave events,
so hovering is tracked with a counter rather than a flag: the highlight
clears only when the counter returns to exactly 0.

The controller is synchronous and independent of any input-event API; a
successful drop yields a StatusChange which the caller sends through the
coordinator's update path.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .schema import Task, TaskId, TaskStatus

logger = logging.getLogger(__name__)


class DragPhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"


@dataclass(frozen=True)
class StatusChange:
    """Command: move ``task_id`` to ``status``."""
    task_id: TaskId
    status: TaskStatus

    def as_changes(self) -> dict:
        return {"status": self.status}


class DragController:
    """Tracks one in-progress drag gesture."""

    def __init__(self):
        self._task: Optional[Task] = None
        self._hover: Optional[TaskStatus] = None
        self._counter = 0

    # ── State ────────────────────────────────────────────────

    @property
    def phase(self) -> DragPhase:
        if self._task is None:
            return DragPhase.IDLE
        if self._hover is not None:
            return DragPhase.HOVERING
        return DragPhase.DRAGGING

    @property
    def task(self) -> Optional[Task]:
        return self._task

    @property
    def hover_column(self) -> Optional[TaskStatus]:
        return self._hover

    @property
    def counter(self) -> int:
        return self._counter

    def is_hovering(self, column) -> bool:
        return self._hover is not None and self._hover == column

    # ── Transitions ──────────────────────────────────────────

    def start(self, task: Task) -> None:
        """Idle → Dragging(task)."""
        if self._task is not None:
            # drag-end from the previous gesture never arrived
            logger.debug(f"Drag of {self._task.id!r} superseded by {task.id!r}")
        self._reset()
        self._task = task

    def enter(self, column) -> None:
        """Pointer entered a drop zone (or one of its children)."""
        if self._task is None:
            return
        target = _column(column)
        if target is None:
            return
        self._counter += 1
        self._hover = target

    def leave(self) -> None:
        """Pointer left a drop zone (or one of its children)."""
        if self._task is None or self._counter == 0:
            return
        self._counter -= 1
        if self._counter == 0:
            self._hover = None

    def drop(self, column) -> Optional[StatusChange]:
        """Hovering → Idle. Returns a command unless dropped on the task's own column."""
        task = self._task
        self._reset()
        if task is None:
            return None
        target = _column(column)
        if target is None or task.status == target:
            return None
        return StatusChange(task_id=task.id, status=target)

    def end(self) -> None:
        """Any → Idle. Runs for completed and cancelled drags alike."""
        self._reset()

    def _reset(self) -> None:
        self._task = None
        self._hover = None
        self._counter = 0


def _column(value) -> Optional[TaskStatus]:
    """Column id → status; unknown ids are ignored rather than raised."""
    try:
        return TaskStatus(value)
    except ValueError:
        logger.debug(f"Ignoring unknown column {value!r}")
        return None


def toggle_complete(task: Task) -> StatusChange:
    """Checkbox shortcut: done → todo, anything else → done."""
    if task.status == TaskStatus.DONE:
        return StatusChange(task_id=task.id, status=TaskStatus.TODO)
    return StatusChange(task_id=task.id, status=TaskStatus.DONE)
