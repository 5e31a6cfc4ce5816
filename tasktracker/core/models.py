from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


# order in which the client cycles through statuses, wrapping around at the end
STATUS_CYCLE: List[TaskStatus] = [
    TaskStatus.PENDING,
    TaskStatus.IN_PROGRESS,
    TaskStatus.COMPLETED,
]


def next_status(status: "TaskStatus | str") -> TaskStatus:
    current = TaskStatus(status)
    index = STATUS_CYCLE.index(current)
    return STATUS_CYCLE[(index + 1) % len(STATUS_CYCLE)]


class TaskFields(BaseModel):
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, value: Any) -> Any:
        return "" if value is None else value


class TaskCreate(TaskFields):
    """Body of POST /api/tasks. Unknown keys are dropped, never persisted."""

    model_config = ConfigDict(extra="ignore")


class TaskUpdate(BaseModel):
    """
    Body of PUT /api/tasks/{id}.
    Only the keys present in the request are applied (merge-patch), so the
    defaults here are never written to the store.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, mode="json")


class Task(TaskFields):
    id: str
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str
    error: Optional[Any] = None
