import logging
import threading
from typing import Dict, List
from uuid import uuid4

from tasktracker.core.models import Task, TaskCreate, TaskUpdate
from tasktracker.core.task_repository import (
    TaskNotFoundError,
    TaskRepository,
    merge_task_update,
    utc_now,
)


class InMemoryTaskRepository(TaskRepository):
    """Process-local task store. Dict insertion order doubles as creation order."""

    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()
        logging.info("Using in-memory task store - tasks are lost on restart")

    def list_tasks(self) -> List[Task]:
        with self._lock:
            return [task.model_copy() for task in self._tasks.values()]

    def create_task(self, task: TaskCreate) -> Task:
        now = utc_now()
        created = Task(
            id=uuid4().hex,
            created_at=now,
            updated_at=now,
            **task.model_dump(),
        )
        with self._lock:
            self._tasks[created.id] = created
        return created.model_copy()

    def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        with self._lock:
            existing = self._tasks.get(task_id)
            if existing is None:
                raise TaskNotFoundError(task_id)
            updated = merge_task_update(existing, update)
            self._tasks[task_id] = updated
            return updated.model_copy()

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            if self._tasks.pop(task_id, None) is None:
                raise TaskNotFoundError(task_id)
