"""Shared fixtures for FlowFocus tests."""

import sys
from pathlib import Path

import pytest

# Make tests/helpers.py importable
sys.path.insert(0, str(Path(__file__).parent))

from helpers import ScriptedGateway, make_task  # noqa: E402
from flowfocus.board import TaskBoard  # noqa: E402
from flowfocus.notify import CollectingNotifier  # noqa: E402


@pytest.fixture
def sample_tasks():
    return [
        make_task(1, "A", status="todo", priority="low"),
        make_task(2, "B", status="done", priority="high"),
    ]


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def gateway(sample_tasks):
    return ScriptedGateway(sample_tasks)


@pytest.fixture
def board(gateway, notifier):
    return TaskBoard(gateway, notifier)
