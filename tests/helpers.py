"""Test doubles and builders."""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List

from flowfocus.gateway import InMemoryTaskGateway
from flowfocus.schema import Task, TaskPriority, TaskStatus

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_task(task_id, title, status="todo", priority="medium", **kw) -> Task:
    kw.setdefault("created_at", T0)
    kw.setdefault("updated_at", T0)
    if "tags" in kw:
        kw["tags"] = tuple(kw["tags"])
    return Task(
        id=task_id,
        title=title,
        status=TaskStatus(status),
        priority=TaskPriority(priority),
        **kw,
    )


class ScriptedGateway(InMemoryTaskGateway):
    """
    In-memory gateway whose calls can be made to fail or to wait.

        gw.pass_next("update")      # first update() succeeds
        gw.fail_next("update", GatewayError("boom"))   # second one fails
        gate = gw.hold("update")    # next update() blocks until gate.set()

    Failures and gates are assigned to calls in the order the calls are made.
    """

    def __init__(self, tasks=()):
        super().__init__(tasks)
        self.calls: List[tuple] = []
        self._failures: Dict[str, list] = {}
        self._gates: Dict[str, list] = {}

    def fail_next(self, op: str, error: Exception) -> None:
        self._failures.setdefault(op, []).append(error)

    def pass_next(self, op: str) -> None:
        """Let the next call succeed; failures queued after it move to later calls."""
        self._failures.setdefault(op, []).append(None)

    def hold(self, op: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates.setdefault(op, []).append(gate)
        return gate

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)

    async def _script(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        failures = self._failures.get(op) or []
        error = failures.pop(0) if failures else None
        gates = self._gates.get(op) or []
        gate = gates.pop(0) if gates else None
        if gate is not None:
            await gate.wait()
        if error is not None:
            raise error

    async def list(self):
        await self._script("list")
        return await super().list()

    async def create(self, draft):
        await self._script("create", draft)
        return await super().create(draft)

    async def update(self, task_id, fields):
        await self._script("update", task_id, dict(fields))
        return await super().update(task_id, fields)

    async def delete(self, task_id):
        await self._script("delete", task_id)
        return await super().delete(task_id)
