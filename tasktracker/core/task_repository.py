"""
Task persistence contract shared by the MongoDB and in-memory backends.

The server talks to storage only through `TaskRepository`, so a backend can be
swapped (or faked in tests) without touching the HTTP layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from tasktracker.core.models import Task, TaskCreate, TaskUpdate
from tasktracker.utils.pydantic_utils import convert_errors


class TaskStoreError(Exception):
    pass


class TaskNotFoundError(TaskStoreError):
    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class TaskValidationError(TaskStoreError):
    def __init__(self, errors: List[Dict[str, Any]]):
        super().__init__(f"Invalid task: {errors}")
        self.errors = errors

    @classmethod
    def from_validation_error(cls, e: ValidationError) -> "TaskValidationError":
        return cls(convert_errors(e))


class StorageError(TaskStoreError):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def merge_task_update(
    task: Task, update: TaskUpdate, now: Optional[datetime] = None
) -> Task:
    """Apply the fields present in `update` on top of `task` and re-validate."""
    merged = task.model_dump()
    merged.update(update.changes())
    merged["updated_at"] = now or utc_now()
    try:
        return Task.model_validate(merged)
    except ValidationError as e:
        raise TaskValidationError.from_validation_error(e)


class TaskRepository(ABC):
    @abstractmethod
    def list_tasks(self) -> List[Task]:
        """All tasks, oldest first."""

    @abstractmethod
    def create_task(self, task: TaskCreate) -> Task:
        """Persist a new task and return it with its assigned id."""

    @abstractmethod
    def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        """Merge the supplied fields into an existing task. Raises TaskNotFoundError."""

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        """Remove a task permanently. Raises TaskNotFoundError."""

    def check_connection(self) -> None:
        """Raise StorageError if the backend can't be reached."""

    def close(self) -> None:
        pass
