from datetime import datetime, timezone

from tasktracker.core.models import Task, TaskStatus

API_URL = "http://tasks.test/api"


def make_task(
    task_id: str = "t1",
    title: str = "Buy milk",
    description: str = "",
    status: TaskStatus = TaskStatus.PENDING,
) -> Task:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Task(
        id=task_id,
        title=title,
        description=description,
        status=status,
        created_at=now,
        updated_at=now,
    )


def task_json(task_id: str = "t1", **fields) -> dict:
    return make_task(task_id, **fields).model_dump(mode="json")
