"""
Notification sinks.

The coordinator reports exactly one outcome per mutation through
``notify(kind, message)``. Sinks are fire-and-forget and never raise.
"""
import json
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, Dict, List, Optional, Protocol, Tuple

import requests

from .schema import utc_now

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


# (operation, kind) → message
MESSAGES: Dict[Tuple[str, NotificationKind], str] = {
    ("created", NotificationKind.SUCCESS): "Task created successfully!",
    ("created", NotificationKind.FAILURE): "Failed to create task",
    ("updated", NotificationKind.SUCCESS): "Task updated successfully!",
    ("updated", NotificationKind.FAILURE): "Failed to update task",
    ("deleted", NotificationKind.SUCCESS): "Task deleted successfully!",
    ("deleted", NotificationKind.FAILURE): "Failed to delete task",
    ("loaded", NotificationKind.FAILURE): "Failed to load tasks",
}


def message_for(operation: str, kind: NotificationKind) -> str:
    return MESSAGES[(operation, kind)]


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }


class NotificationSink(Protocol):
    def notify(self, kind: NotificationKind, message: str) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the log: successes at INFO, failures at ERROR."""

    def __init__(self, name: str = "flowfocus.notifications"):
        self._log = logging.getLogger(name)

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind == NotificationKind.FAILURE:
            self._log.error(message)
        else:
            self._log.info(message)


class CollectingNotifier:
    """Keeps the most recent notifications in memory (the toast stack)."""

    def __init__(self, maxlen: int = 50):
        self._items: Deque[Notification] = deque(maxlen=maxlen)

    def notify(self, kind: NotificationKind, message: str) -> None:
        self._items.append(Notification(kind=kind, message=message))

    @property
    def items(self) -> List[Notification]:
        return list(self._items)

    def failures(self) -> List[Notification]:
        return [n for n in self._items if n.kind == NotificationKind.FAILURE]

    def successes(self) -> List[Notification]:
        return [n for n in self._items if n.kind == NotificationKind.SUCCESS]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class WebhookNotifier:
    """
    POSTs each notification as JSON to a webhook URL.

    Delivery failures are logged and the notification is handed to
    ``fallback`` (if any) instead; notify() never raises.
    """

    def __init__(self, url: str, fallback: Optional[NotificationSink] = None, timeout: float = 2):
        self.url = url
        self.fallback = fallback
        self.timeout = timeout

    def notify(self, kind: NotificationKind, message: str) -> None:
        payload = json.dumps(Notification(kind=kind, message=message).to_dict())
        try:
            r = requests.post(
                self.url,
                data=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            if r.ok:
                return
            logger.warning(f"Webhook {self.url} answered {r.status_code}")
        except requests.RequestException as e:
            logger.warning(f"Webhook {self.url} unreachable: {e}")

        if self.fallback is not None:
            self.fallback.notify(kind, message)


class FanoutNotifier:
    """Forwards every notification to several sinks."""

    def __init__(self, *sinks: NotificationSink):
        self.sinks = list(sinks)

    def notify(self, kind: NotificationKind, message: str) -> None:
        for sink in self.sinks:
            sink.notify(kind, message)
