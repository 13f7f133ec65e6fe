"""Tests for the in-memory task store."""
import pytest

from flowfocus.schema import TaskStatus
from flowfocus.store import TaskStore

from helpers import make_task


def test_list_preserves_insertion_order():
    store = TaskStore()
    for i, title in enumerate(["a", "b", "c"], start=1):
        store.add(make_task(i, title))
    assert [t.title for t in store.list()] == ["a", "b", "c"]
    assert len(store) == 3


def test_list_returns_a_copy():
    store = TaskStore([make_task(1, "a")])
    snapshot = store.list()
    snapshot.clear()
    assert len(store) == 1


def test_add_duplicate_id_raises():
    store = TaskStore([make_task(1, "a")])
    with pytest.raises(ValueError):
        store.add(make_task(1, "again"))
    assert len(store) == 1


def test_replace_keeps_position():
    store = TaskStore([make_task(1, "a"), make_task(2, "b"), make_task(3, "c")])
    store.replace(2, make_task(2, "B", status="done"))
    assert [t.title for t in store.list()] == ["a", "B", "c"]
    assert store.get(2).status == TaskStatus.DONE


def test_replace_unknown_id_is_ignored():
    store = TaskStore([make_task(1, "a")])
    store.replace(99, make_task(99, "ghost"))
    assert 99 not in store
    assert [t.id for t in store.list()] == [1]


def test_replace_with_mismatched_id_raises():
    store = TaskStore([make_task(1, "a")])
    with pytest.raises(ValueError):
        store.replace(1, make_task(2, "b"))


def test_remove_and_remove_unknown():
    store = TaskStore([make_task(1, "a"), make_task(2, "b")])
    store.remove(1)
    store.remove(42)
    assert [t.id for t in store.list()] == [2]


def test_reset_rejects_duplicates_and_keeps_old_contents():
    store = TaskStore([make_task(1, "a")])
    with pytest.raises(ValueError):
        store.reset([make_task(5, "x"), make_task(5, "y")])
    assert [t.id for t in store.list()] == [1]
