import pytest
from pydantic import ValidationError

from tasktracker.core.models import (
    STATUS_CYCLE,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    next_status,
)


@pytest.mark.parametrize(
    "current,expected",
    [
        ("pending", TaskStatus.IN_PROGRESS),
        ("in-progress", TaskStatus.COMPLETED),
        ("completed", TaskStatus.PENDING),
    ],
)
def test_next_status_cycles(current, expected):
    assert next_status(current) == expected


def test_next_status_visits_every_status_and_wraps():
    status = TaskStatus.PENDING
    seen = []
    for _ in range(len(STATUS_CYCLE)):
        seen.append(status)
        status = next_status(status)
    assert status == TaskStatus.PENDING
    assert set(seen) == set(TaskStatus)


def test_next_status_rejects_unknown_status():
    with pytest.raises(ValueError):
        next_status("archived")


def test_task_create_defaults():
    task = TaskCreate(title="Buy milk")
    assert task.description == ""
    assert task.status == TaskStatus.PENDING


def test_task_create_keeps_supplied_status():
    task = TaskCreate(title="Buy milk", status="completed")
    assert task.status == TaskStatus.COMPLETED


@pytest.mark.parametrize("title", ["", "   "])
def test_task_create_rejects_empty_title(title):
    with pytest.raises(ValidationError):
        TaskCreate(title=title)


def test_task_create_requires_title():
    with pytest.raises(ValidationError):
        TaskCreate(description="no title")


def test_task_create_rejects_unknown_status():
    with pytest.raises(ValidationError):
        TaskCreate(title="Buy milk", status="done")


def test_task_create_drops_unknown_fields():
    task = TaskCreate.model_validate({"title": "Buy milk", "owner": "someone"})
    assert "owner" not in task.model_dump()


def test_task_create_null_description_becomes_empty():
    assert TaskCreate(title="Buy milk", description=None).description == ""


def test_task_update_changes_only_contains_supplied_fields():
    update = TaskUpdate.model_validate({"description": "2 litres"})
    assert update.changes() == {"description": "2 litres"}


def test_task_update_changes_serializes_status():
    update = TaskUpdate.model_validate({"status": "in-progress"})
    assert update.changes() == {"status": "in-progress"}


def test_task_update_rejects_unknown_status():
    with pytest.raises(ValidationError):
        TaskUpdate.model_validate({"status": "done"})
