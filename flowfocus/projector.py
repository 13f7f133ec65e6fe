"""
Filter/search projection over the task store.

A task is visible iff it matches the search term AND the status filter AND
the priority filter. The projection is stable (store order) and never copies
or mutates task records.
"""
from dataclasses import dataclass
from typing import Iterable, List, Union

from .schema import Task, TaskStatus, TaskPriority

ALL = "all"

StatusFilter = Union[TaskStatus, str]
PriorityFilter = Union[TaskPriority, str]


def matches_search(task: Task, term: str) -> bool:
    """Case-insensitive substring match on title, description or any tag."""
    if not term:
        return True
    needle = term.lower()
    if needle in task.title.lower():
        return True
    if needle in task.description.lower():
        return True
    return any(needle in tag.lower() for tag in task.tags)


def project(
    tasks: Iterable[Task],
    search_term: str = "",
    status_filter: StatusFilter = ALL,
    priority_filter: PriorityFilter = ALL,
) -> List[Task]:
    return [
        task for task in tasks
        if matches_search(task, search_term)
        and (status_filter == ALL or task.status == status_filter)
        and (priority_filter == ALL or task.priority == priority_filter)
    ]


@dataclass(frozen=True)
class BoardFilter:
    """The board's current search text and filter selectors."""
    search_term: str = ""
    status: StatusFilter = ALL
    priority: PriorityFilter = ALL

    def matches(self, task: Task) -> bool:
        return bool(project([task], self.search_term, self.status, self.priority))

    def apply(self, tasks: Iterable[Task]) -> List[Task]:
        return project(tasks, self.search_term, self.status, self.priority)

    @property
    def is_active(self) -> bool:
        return bool(self.search_term) or self.status != ALL or self.priority != ALL


def coerce_status_filter(value) -> StatusFilter:
    """'all' or a status (enum or its value); anything else is a ValidationError."""
    if value is None or value == ALL:
        return ALL
    return TaskStatus.parse(value)


def coerce_priority_filter(value) -> PriorityFilter:
    if value is None or value == ALL:
        return ALL
    return TaskPriority.parse(value)
