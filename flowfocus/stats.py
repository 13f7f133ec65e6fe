"""Dashboard aggregates over the full task list."""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .dates import is_overdue
from .schema import Task, TaskPriority, TaskStatus


@dataclass(frozen=True)
class BoardStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    todo: int = 0
    completion_rate: float = 0.0   # percent, 0–100
    overdue: int = 0
    priority_breakdown: Dict[TaskPriority, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "completed": self.completed,
            "in_progress": self.in_progress,
            "todo": self.todo,
            "completion_rate": round(self.completion_rate, 1),
            "overdue": self.overdue,
            "priority_breakdown": {p.value: n for p, n in self.priority_breakdown.items()},
        }


def compute_stats(tasks: Iterable[Task], today: Optional[date] = None) -> BoardStats:
    tasks = list(tasks)
    today = today or date.today()

    by_status = {status: 0 for status in TaskStatus}
    by_priority = {priority: 0 for priority in TaskPriority}
    overdue = 0
    for task in tasks:
        by_status[task.status] += 1
        by_priority[task.priority] += 1
        if is_overdue(task.due_date, today, task.status):
            overdue += 1

    total = len(tasks)
    completed = by_status[TaskStatus.DONE]
    return BoardStats(
        total=total,
        completed=completed,
        in_progress=by_status[TaskStatus.INPROGRESS],
        todo=by_status[TaskStatus.TODO],
        completion_rate=(completed / total) * 100 if total else 0.0,
        overdue=overdue,
        priority_breakdown=by_priority,
    )


def completion_chart(stats: BoardStats) -> List[Tuple[str, int]]:
    """Pie chart series: Completed / In Progress / To Do."""
    return [
        ("Completed", stats.completed),
        ("In Progress", stats.in_progress),
        ("To Do", stats.todo),
    ]


def priority_chart(stats: BoardStats) -> List[Tuple[str, int]]:
    """Bar chart series, most urgent first."""
    order = (TaskPriority.URGENT, TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW)
    return [(p.value.capitalize(), stats.priority_breakdown.get(p, 0)) for p in order]
