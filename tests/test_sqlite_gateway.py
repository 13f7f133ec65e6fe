"""
Tests for the SQLite-backed gateway.

Each test gets its own database file under tmp_path.
"""
import asyncio
import sqlite3
from datetime import date

import pytest

from flowfocus.errors import GatewayError, NotFoundError, ValidationError
from flowfocus.schema import TaskDraft, TaskPriority, TaskStatus
from flowfocus.sqlite_gateway import SqliteTaskGateway

from helpers import T0


@pytest.fixture
def gw(tmp_path):
    return SqliteTaskGateway(str(tmp_path / "data" / "tasks.db"))


def draft(title="Write docs", **kw):
    kw.setdefault("created_at", T0)
    kw.setdefault("updated_at", T0)
    return TaskDraft(title=title, **kw)


def test_creates_parent_directory(tmp_path):
    SqliteTaskGateway(str(tmp_path / "nested" / "dir" / "tasks.db"))
    assert (tmp_path / "nested" / "dir" / "tasks.db").exists()


def test_create_assigns_sequential_ids(gw):
    first = asyncio.run(gw.create(draft("One")))
    second = asyncio.run(gw.create(draft("Two")))
    assert (first.id, second.id) == (1, 2)


def test_round_trip_keeps_every_field(gw):
    created = asyncio.run(gw.create(draft(
        "Ship",
        description="v1.0",
        status=TaskStatus.INPROGRESS,
        priority=TaskPriority.URGENT,
        due_date=date(2024, 3, 5),
        tags=("release", "ops"),
    )))
    [loaded] = asyncio.run(gw.list())
    assert loaded == created
    assert loaded.tags == ("release", "ops")
    assert loaded.due_date == date(2024, 3, 5)


def test_create_rejects_blank_title(gw):
    with pytest.raises(ValidationError):
        asyncio.run(gw.create(draft("  ")))
    assert asyncio.run(gw.list()) == []


def test_update_returns_full_record(gw):
    task = asyncio.run(gw.create(draft("Old")))
    updated = asyncio.run(gw.update(task.id, {"title": "New", "status": TaskStatus.DONE, "due_date": None}))
    assert updated.title == "New"
    assert updated.status == TaskStatus.DONE
    assert updated.priority == task.priority
    assert updated.created_at == task.created_at


def test_update_missing_task(gw):
    with pytest.raises(NotFoundError):
        asyncio.run(gw.update(99, {"title": "x"}))


def test_update_with_no_fields_reads_back(gw):
    task = asyncio.run(gw.create(draft()))
    assert asyncio.run(gw.update(task.id, {})) == task
    with pytest.raises(NotFoundError):
        asyncio.run(gw.update(42, {}))


def test_delete(gw):
    task = asyncio.run(gw.create(draft()))
    asyncio.run(gw.delete(task.id))
    assert asyncio.run(gw.list()) == []
    with pytest.raises(NotFoundError):
        asyncio.run(gw.delete(task.id))


def test_malformed_due_date_row_loads_as_absent(gw):
    task = asyncio.run(gw.create(draft(due_date=date(2024, 3, 5))))
    with sqlite3.connect(gw.db_path) as conn:
        conn.execute("UPDATE tasks SET due_date = 'someday', tags = 'not json' WHERE id = ?", (task.id,))
    [loaded] = asyncio.run(gw.list())
    assert loaded.due_date is None
    assert loaded.tags == ()


def test_sqlite_errors_become_gateway_errors(gw):
    with sqlite3.connect(gw.db_path) as conn:
        conn.execute("DROP TABLE tasks")
    with pytest.raises(GatewayError):
        asyncio.run(gw.list())
