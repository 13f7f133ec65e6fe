"""
Status column grouping.

Always built from the filtered task set, so column counts reflect the
active filters. All three columns are always present, even when empty.
"""
from typing import Dict, Iterable, Iterator, List, Tuple

from .schema import COLUMNS, Column, Task, TaskStatus


def group_by_status(tasks: Iterable[Task]) -> Dict[TaskStatus, List[Task]]:
    """Partition tasks into per-status buckets, preserving input order."""
    buckets: Dict[TaskStatus, List[Task]] = {col.status: [] for col in COLUMNS}
    for task in tasks:
        buckets[task.status].append(task)
    return buckets


def count_by_status(grouping: Dict[TaskStatus, List[Task]], status) -> int:
    return len(grouping.get(TaskStatus(status), []))


class ColumnGrouping:
    """Read-only view of a grouped board."""

    def __init__(self, tasks: Iterable[Task]):
        self._buckets = group_by_status(tasks)

    def tasks(self, status) -> List[Task]:
        return list(self._buckets[TaskStatus(status)])

    def count(self, status) -> int:
        return count_by_status(self._buckets, status)

    def is_empty(self, status) -> bool:
        return self.count(status) == 0

    @property
    def total(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def as_dict(self) -> Dict[TaskStatus, List[Task]]:
        return {status: list(bucket) for status, bucket in self._buckets.items()}

    def __getitem__(self, status) -> List[Task]:
        return self.tasks(status)

    def __iter__(self) -> Iterator[Tuple[Column, List[Task]]]:
        for col in COLUMNS:
            yield col, list(self._buckets[col.status])
