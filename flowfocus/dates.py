"""
Due date handling.

On the wire a due date is either a date (``2024-03-05``) or an ISO-8601
date-time; the edit form writes midnight UTC (``2024-03-05T00:00:00.000Z``).
Both read as the same calendar date. Malformed values are rejected by
parse_due_date() and treated as "no due date" by read_due_date().
"""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .errors import MalformedDateError

logger = logging.getLogger(__name__)


def parse_due_date(value) -> Optional[date]:
    """Parse a due date; raises MalformedDateError for unparseable input."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return _utc_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise MalformedDateError(value)

    text = value.strip()
    if not text:
        return None

    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise MalformedDateError(value) from None

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return _utc_date(datetime.fromisoformat(text))
    except ValueError:
        raise MalformedDateError(value) from None


def read_due_date(value) -> Optional[date]:
    """Lenient parse: a malformed date is logged and treated as absent."""
    try:
        return parse_due_date(value)
    except MalformedDateError as e:
        logger.warning(f"Ignoring due date: {e}")
        return None


def _utc_date(dt: datetime) -> date:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()


def to_wire(due: Optional[date]) -> Optional[str]:
    return due.isoformat() if due else None


def format_due_date(due: Optional[date], today: Optional[date] = None) -> str:
    """Short label for a task card: Today, Tomorrow or e.g. 'Mar 5'."""
    if due is None:
        return ""
    today = today or date.today()
    if due == today:
        return "Today"
    if due == today + timedelta(days=1):
        return "Tomorrow"
    return f"{due:%b} {due.day}"


def is_overdue(due: Optional[date], today: Optional[date] = None, status=None) -> bool:
    """True when the due date is strictly in the past and the task is not done."""
    if due is None:
        return False
    if status is not None and str(getattr(status, "value", status)) == "done":
        return False
    return due < (today or date.today())
