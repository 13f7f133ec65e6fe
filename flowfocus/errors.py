"""
Error taxonomy for the task board.

Everything the gateway may raise derives from TaskBoardError so the mutation
coordinator can convert it into a single failure notification.
"""


class TaskBoardError(Exception):
    """Base class for all task board errors."""
    pass


class ValidationError(TaskBoardError):
    """A task or a change violates a local invariant (e.g. empty title)."""
    pass


class NotFoundError(TaskBoardError):
    """The gateway (or the store) has no task with the given id."""

    def __init__(self, task_id):
        super().__init__(f"Task {task_id!r} not found")
        self.task_id = task_id


class GatewayError(TaskBoardError):
    """Transport or storage fault in the persistence gateway."""
    pass


class MalformedDateError(ValidationError):
    """A due date string could not be parsed."""

    def __init__(self, value):
        super().__init__(f"Malformed due date: {value!r}")
        self.value = value
