"""
SQLite-backed task gateway.

Provides durable CRUD for tasks behind the async gateway contract. Blocking
sqlite3 calls run in a worker thread; sqlite errors surface as GatewayError.
"""
import asyncio
import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from . import dates
from .errors import GatewayError, NotFoundError, ValidationError
from .schema import Task, TaskDraft, TaskId

logger = logging.getLogger(__name__)

DEFAULT_DB = Path.home() / ".local" / "share" / "flowfocus" / "tasks.db"

_COLUMNS = ("title", "description", "status", "priority", "due_date", "tags", "created_at", "updated_at")


@contextmanager
def _connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """Open a connection with WAL mode; commit on success, always close."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode = WAL")
        yield conn
        conn.commit()
    finally:
        conn.close()


def _to_row(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert Task attribute values to column values."""
    row: Dict[str, Any] = {}
    for name, value in values.items():
        if name in ("status", "priority"):
            row[name] = getattr(value, "value", value)
        elif name == "due_date":
            row[name] = dates.to_wire(value)
        elif name == "tags":
            row[name] = json.dumps(list(value))
        elif name in ("created_at", "updated_at"):
            row[name] = value.isoformat()
        else:
            row[name] = value
    return row


def _row_to_task(row: sqlite3.Row) -> Task:
    data = dict(row)
    try:
        data["tags"] = json.loads(data["tags"]) if data.get("tags") else []
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Task {data.get('id')}: unreadable tags column, using []")
        data["tags"] = []
    try:
        return Task.from_dict(data)
    except ValidationError as e:
        raise GatewayError(f"Corrupt task row {data.get('id')}: {e}") from e


class SqliteTaskGateway:
    """Task gateway persisted in a single SQLite table."""

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            db_path = str(DEFAULT_DB)
        self.db_path = str(db_path)
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'todo',
                    priority TEXT NOT NULL DEFAULT 'medium',
                    due_date TEXT,
                    tags TEXT,  -- JSON list
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status)")

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as e:
            raise GatewayError(f"SQLite error: {e}") from e

    # ── Blocking implementations ─────────────────────────────

    def _list(self) -> List[Task]:
        with _connect(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM tasks ORDER BY id ASC").fetchall()
        return [_row_to_task(row) for row in rows]

    def _create(self, draft: TaskDraft) -> Task:
        if not draft.title.strip():
            raise ValidationError("Title must not be empty")
        row = _to_row({name: getattr(draft, name) for name in _COLUMNS})
        with _connect(self.db_path) as conn:
            cursor = conn.execute(
                f"INSERT INTO tasks ({', '.join(_COLUMNS)}) VALUES ({', '.join('?' for _ in _COLUMNS)})",
                tuple(row[name] for name in _COLUMNS),
            )
            task_id = cursor.lastrowid
        return Task.from_draft(task_id, draft)

    def _update(self, task_id: TaskId, fields: Mapping[str, Any]) -> Task:
        unknown = set(fields) - set(_COLUMNS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        row = _to_row(fields)
        with _connect(self.db_path) as conn:
            if row:
                assignments = ", ".join(f"{name} = ?" for name in row)
                cursor = conn.execute(
                    f"UPDATE tasks SET {assignments} WHERE id = ?",
                    (*row.values(), task_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(task_id)
            result = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        if result is None:
            raise NotFoundError(task_id)
        return _row_to_task(result)

    def _delete(self, task_id: TaskId) -> None:
        with _connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(task_id)

    # ── Gateway contract ─────────────────────────────────────

    async def list(self) -> List[Task]:
        return await self._run(self._list)

    async def create(self, draft: TaskDraft) -> Task:
        task = await self._run(self._create, draft)
        logger.debug(f"Created task {task.id} in {self.db_path}")
        return task

    async def update(self, task_id: TaskId, fields: Mapping[str, Any]) -> Task:
        return await self._run(self._update, task_id, dict(fields))

    async def delete(self, task_id: TaskId) -> None:
        await self._run(self._delete, task_id)
