"""
Task schema for the FlowFocus board.

A task lives in exactly one status column:
  todo → inprogress → done   (any column can move to any other)

Records are immutable; every edit produces a new Task via with_changes(),
so views and the store can share references without drifting.
"""
from enum import Enum
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Optional, Tuple, Dict, Any, Mapping, Union

from . import dates
from .errors import ValidationError

TaskId = Union[int, str]


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Board columns."""
    TODO = "todo"
    INPROGRESS = "inprogress"
    DONE = "done"

    @classmethod
    def parse(cls, value) -> "TaskStatus":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Invalid status: {value!r}. Allowed: {', '.join(s.value for s in cls)}"
            ) from None


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def parse(cls, value) -> "TaskPriority":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Invalid priority: {value!r}. Allowed: {', '.join(p.value for p in cls)}"
            ) from None

    @classmethod
    def from_str(cls, value) -> "TaskPriority":
        """Lenient variant for stored records; unknown values read as medium."""
        try:
            return cls(value)
        except ValueError:
            return cls.MEDIUM


@dataclass(frozen=True)
class Column:
    status: TaskStatus
    title: str


COLUMNS: Tuple[Column, ...] = (
    Column(TaskStatus.TODO, "To Do"),
    Column(TaskStatus.INPROGRESS, "In Progress"),
    Column(TaskStatus.DONE, "Done"),
)

EDITABLE_FIELDS = frozenset({"title", "description", "status", "priority", "due_date", "tags"})

# Wire (camelCase) name → attribute name
_WIRE_NAMES = {
    "dueDate": "due_date",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


@dataclass(frozen=True)
class TaskDraft:
    """A task that has not been assigned an id by the gateway yet."""
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    tags: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "dueDate": dates.to_wire(self.due_date),
            "tags": list(self.tags),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class Task:
    """A task on the board. ``id`` is assigned by the gateway and never changes."""

    id: TaskId
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None
    tags: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_draft(cls, task_id: TaskId, draft: TaskDraft) -> "Task":
        return cls(
            id=task_id,
            title=draft.title,
            description=draft.description,
            status=draft.status,
            priority=draft.priority,
            due_date=draft.due_date,
            tags=draft.tags,
            created_at=draft.created_at,
            updated_at=draft.updated_at,
        )

    def with_changes(self, **fields) -> "Task":
        """Return a copy with the given attributes replaced."""
        if "id" in fields and fields["id"] != self.id:
            raise ValidationError(f"Task id is immutable ({self.id!r})")
        return replace(self, **fields)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "dueDate": dates.to_wire(self.due_date),
            "tags": list(self.tags),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        """Deserialize from the wire shape (camelCase or snake_case keys)."""
        data = {_WIRE_NAMES.get(k, k): v for k, v in data.items()}
        if data.get("id") is None:
            raise ValidationError("Task record has no id")

        created_at = _read_timestamp(data.get("created_at"))
        updated_at = _read_timestamp(data.get("updated_at")) if data.get("updated_at") else created_at

        return cls(
            id=data["id"],
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            status=TaskStatus.parse(data.get("status") or TaskStatus.TODO.value),
            priority=TaskPriority.from_str(data.get("priority") or TaskPriority.MEDIUM.value),
            due_date=dates.read_due_date(data.get("due_date")),
            tags=tuple(str(t) for t in (data.get("tags") or []) if str(t).strip()),
            created_at=created_at,
            updated_at=max(updated_at, created_at),
        )


def _read_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif value:
        text = str(value)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Malformed timestamp: {value!r}") from None
    else:
        return utc_now()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_tags(text: str) -> Tuple[str, ...]:
    """Split the comma-separated tag input: 'design, urgent' → ('design', 'urgent')."""
    return tuple(part.strip() for part in (text or "").split(",") if part.strip())


def validate_title(title) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title must not be empty")
    return title.strip()


def validate_tags(tags) -> Tuple[str, ...]:
    if isinstance(tags, str):
        raise ValidationError("Tags must be a sequence of strings, not a single string")
    result = []
    for tag in tags or ():
        if not isinstance(tag, str) or not tag.strip():
            raise ValidationError(f"Invalid tag: {tag!r}")
        result.append(tag)
    return tuple(result)


def validate_changes(changes: Mapping[str, Any], task_id: Optional[TaskId] = None) -> Dict[str, Any]:
    """
    Validate and coerce a partial update.

    Returns:
        dict of attribute name → coerced value, restricted to EDITABLE_FIELDS.

    Raises:
        ValidationError on unknown fields, empty titles, bad enum values,
        malformed due dates or empty tags.
    """
    result: Dict[str, Any] = {}
    for raw_name, value in changes.items():
        name = _WIRE_NAMES.get(raw_name, raw_name)

        if name == "id":
            if task_id is not None and value != task_id:
                raise ValidationError(f"Cannot change task id {task_id!r} to {value!r}")
            continue
        if name in ("created_at", "updated_at"):
            continue  # timestamps are owned by the coordinator
        if name not in EDITABLE_FIELDS:
            raise ValidationError(f"Unknown field: {raw_name}")

        if name == "title":
            result[name] = validate_title(value)
        elif name == "description":
            result[name] = "" if value is None else str(value)
        elif name == "status":
            result[name] = TaskStatus.parse(value)
        elif name == "priority":
            result[name] = TaskPriority.parse(value)
        elif name == "due_date":
            # user input: a malformed date is rejected, not dropped
            result[name] = dates.parse_due_date(value)
        elif name == "tags":
            result[name] = validate_tags(value)

    return result
