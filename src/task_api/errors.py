from __future__ import annotations


class TaskError(Exception):
    """Base class for task domain errors."""


class TaskNotFoundError(TaskError):
    """Raised when an operation targets a task id that does not exist."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task not found with id {task_id}")
        self.task_id = task_id


class TaskValidationError(TaskError):
    """Raised when the store rejects a record, e.g. a NOT NULL column is missing."""


class StorageUnavailableError(TaskError):
    """Raised when the backing store cannot be reached or fails mid-transaction."""
