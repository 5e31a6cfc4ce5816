"""
State of the task client and the transitions between states.

Every transition is a pure function: it takes a BoardState and returns a new one,
so the client's behaviour can be exercised without a terminal or a server.
"""

from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from tasktracker.core.models import Task

TASK_ADDED_MESSAGE = "Task added successfully!"
TASK_UPDATED_MESSAGE = "Task updated successfully!"
STATUS_UPDATED_MESSAGE = "Status updated!"
TASK_DELETED_MESSAGE = "Task deleted!"

LOAD_FAILED_ERROR = "Failed to fetch tasks."
CREATE_FAILED_ERROR = "Failed to add task."
STATUS_FAILED_ERROR = "Status update failed."
UPDATE_FAILED_ERROR = "Update failed."
DELETE_FAILED_ERROR = "Delete failed."
TITLE_REQUIRED_ERROR = "Title is required."
REQUEST_IN_PROGRESS_ERROR = "Request already in progress."
UNKNOWN_TASK_ERROR = "Task not found."

LOAD_REQUEST = "load"
CREATE_REQUEST = "create"


def status_request(task_id: str) -> str:
    return f"status:{task_id}"


def edit_request(task_id: str) -> str:
    return f"edit:{task_id}"


def delete_request(task_id: str) -> str:
    return f"delete:{task_id}"


class EditForm(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_id: str
    title: str
    description: str


class BoardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    tasks: Tuple[Task, ...] = ()
    title: str = ""
    description: str = ""
    editing: Optional[EditForm] = None
    loading: bool = False
    message: str = ""
    error: str = ""
    # bumped whenever a message is shown; a pending expiry only clears its own generation
    message_generation: int = 0
    in_flight: FrozenSet[str] = frozenset()

    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None


def load_started(state: BoardState) -> BoardState:
    return state.model_copy(update={"loading": True})


def load_succeeded(state: BoardState, tasks) -> BoardState:
    return state.model_copy(update={"tasks": tuple(tasks), "loading": False})


def load_failed(state: BoardState, error: str = LOAD_FAILED_ERROR) -> BoardState:
    return show_error(state.model_copy(update={"loading": False}), error)


def set_form(
    state: BoardState,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> BoardState:
    update = {}
    if title is not None:
        update["title"] = title
    if description is not None:
        update["description"] = description
    return state.model_copy(update=update)


def can_submit(state: BoardState) -> bool:
    return bool(state.title.strip())


def task_created(state: BoardState, task: Task) -> BoardState:
    state = state.model_copy(
        update={"tasks": state.tasks + (task,), "title": "", "description": ""}
    )
    return show_message(state, TASK_ADDED_MESSAGE)


def task_replaced(state: BoardState, task: Task) -> BoardState:
    tasks = tuple(task if existing.id == task.id else existing for existing in state.tasks)
    return state.model_copy(update={"tasks": tasks})


def task_removed(state: BoardState, task_id: str) -> BoardState:
    tasks = tuple(task for task in state.tasks if task.id != task_id)
    return state.model_copy(update={"tasks": tasks})


def start_editing(state: BoardState, task: Task) -> BoardState:
    form = EditForm(task_id=task.id, title=task.title, description=task.description)
    return state.model_copy(update={"editing": form})


def set_edit_form(
    state: BoardState,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> BoardState:
    if state.editing is None:
        return state
    update = {}
    if title is not None:
        update["title"] = title
    if description is not None:
        update["description"] = description
    return state.model_copy(update={"editing": state.editing.model_copy(update=update)})


def edit_succeeded(state: BoardState, task: Task) -> BoardState:
    state = task_replaced(state, task).model_copy(update={"editing": None})
    return show_message(state, TASK_UPDATED_MESSAGE)


def cancel_editing(state: BoardState) -> BoardState:
    return state.model_copy(update={"editing": None})


def show_message(state: BoardState, text: str) -> BoardState:
    return state.model_copy(
        update={
            "message": text,
            "error": "",
            "message_generation": state.message_generation + 1,
        }
    )


def show_error(state: BoardState, text: str) -> BoardState:
    return state.model_copy(
        update={
            "message": "",
            "error": text,
            "message_generation": state.message_generation + 1,
        }
    )


def expire_messages(state: BoardState, generation: int) -> BoardState:
    if generation != state.message_generation:
        return state
    return state.model_copy(update={"message": "", "error": ""})


def request_started(state: BoardState, key: str) -> BoardState:
    return state.model_copy(update={"in_flight": state.in_flight | {key}})


def request_finished(state: BoardState, key: str) -> BoardState:
    return state.model_copy(update={"in_flight": state.in_flight - {key}})
