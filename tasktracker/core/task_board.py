import logging
import threading
from typing import Callable, Optional

from tasktracker.clients.task_api_client import TaskApiClient, TaskApiError
from tasktracker.common.env_vars import TASKS_MESSAGE_TIMEOUT_SECONDS
from tasktracker.core import board_state as transitions
from tasktracker.core.board_state import (
    CREATE_FAILED_ERROR,
    CREATE_REQUEST,
    DELETE_FAILED_ERROR,
    LOAD_REQUEST,
    REQUEST_IN_PROGRESS_ERROR,
    STATUS_FAILED_ERROR,
    STATUS_UPDATED_MESSAGE,
    TASK_DELETED_MESSAGE,
    TITLE_REQUIRED_ERROR,
    UNKNOWN_TASK_ERROR,
    UPDATE_FAILED_ERROR,
    BoardState,
    delete_request,
    edit_request,
    status_request,
)
from tasktracker.core.models import next_status


class MessageTimer:
    """Calls `on_expire(generation)` once `delay` seconds pass without a restart."""

    def __init__(self, delay: float, on_expire: Callable[[int], None]):
        self.delay = delay
        self.on_expire = on_expire
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def restart(self, generation: int) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self.on_expire, args=(generation,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class TaskBoard:
    """
    Drives the client: applies BoardState transitions around each API call.

    Each action issues at most one request and refuses to start while a request
    for the same affordance (the create form, one task's status, ...) is still
    in flight. Failures are never retried; they become the action's error message.
    """

    def __init__(
        self,
        api: TaskApiClient,
        message_timeout: float = TASKS_MESSAGE_TIMEOUT_SECONDS,
        on_change: Optional[Callable[[BoardState], None]] = None,
    ):
        self.api = api
        self.on_change = on_change
        self.timer = MessageTimer(message_timeout, self._expire_messages)
        self._state = BoardState()
        self._lock = threading.RLock()

    @property
    def state(self) -> BoardState:
        return self._state

    def _apply(self, transition, *args) -> BoardState:
        with self._lock:
            previous = self._state
            self._state = transition(previous, *args)
            new_state = self._state
        if new_state.message_generation != previous.message_generation:
            self.timer.restart(new_state.message_generation)
        if self.on_change is not None:
            self.on_change(new_state)
        return new_state

    def _expire_messages(self, generation: int) -> None:
        self._apply(transitions.expire_messages, generation)

    def _begin(self, key: str) -> bool:
        with self._lock:
            if key in self._state.in_flight:
                self._apply(transitions.show_error, REQUEST_IN_PROGRESS_ERROR)
                return False
            self._apply(transitions.request_started, key)
        return True

    def _finish(self, key: str) -> None:
        self._apply(transitions.request_finished, key)

    def load(self) -> bool:
        if not self._begin(LOAD_REQUEST):
            return False
        self._apply(transitions.load_started)
        try:
            tasks = self.api.list_tasks()
        except TaskApiError as e:
            logging.debug(f"Failed to fetch tasks: {e}")
            self._apply(transitions.load_failed)
            return False
        finally:
            self._finish(LOAD_REQUEST)
        self._apply(transitions.load_succeeded, tasks)
        return True

    def set_form(
        self, title: Optional[str] = None, description: Optional[str] = None
    ) -> None:
        self._apply(transitions.set_form, title, description)

    def create(self) -> bool:
        state = self._state
        if not transitions.can_submit(state):
            self._apply(transitions.show_error, TITLE_REQUIRED_ERROR)
            return False
        if not self._begin(CREATE_REQUEST):
            return False
        try:
            task = self.api.create_task(state.title, state.description)
        except TaskApiError as e:
            logging.debug(f"Failed to add task: {e}")
            self._apply(transitions.show_error, CREATE_FAILED_ERROR)
            return False
        finally:
            self._finish(CREATE_REQUEST)
        self._apply(transitions.task_created, task)
        return True

    def cycle_status(self, task_id: str) -> bool:
        task = self._state.find_task(task_id)
        if task is None:
            self._apply(transitions.show_error, UNKNOWN_TASK_ERROR)
            return False
        key = status_request(task_id)
        if not self._begin(key):
            return False
        try:
            updated = self.api.update_task(task_id, status=next_status(task.status))
        except TaskApiError as e:
            logging.debug(f"Failed to update status of task {task_id}: {e}")
            self._apply(transitions.show_error, STATUS_FAILED_ERROR)
            return False
        finally:
            self._finish(key)
        self._apply(transitions.task_replaced, updated)
        self._apply(transitions.show_message, STATUS_UPDATED_MESSAGE)
        return True

    def start_editing(self, task_id: str) -> bool:
        task = self._state.find_task(task_id)
        if task is None:
            self._apply(transitions.show_error, UNKNOWN_TASK_ERROR)
            return False
        self._apply(transitions.start_editing, task)
        return True

    def set_edit_form(
        self, title: Optional[str] = None, description: Optional[str] = None
    ) -> None:
        self._apply(transitions.set_edit_form, title, description)

    def save_edit(self) -> bool:
        form = self._state.editing
        if form is None:
            return False
        if not form.title.strip():
            self._apply(transitions.show_error, TITLE_REQUIRED_ERROR)
            return False
        key = edit_request(form.task_id)
        if not self._begin(key):
            return False
        try:
            updated = self.api.update_task(
                form.task_id, title=form.title, description=form.description
            )
        except TaskApiError as e:
            logging.debug(f"Failed to update task {form.task_id}: {e}")
            self._apply(transitions.show_error, UPDATE_FAILED_ERROR)
            return False
        finally:
            self._finish(key)
        self._apply(transitions.edit_succeeded, updated)
        return True

    def cancel_edit(self) -> None:
        self._apply(transitions.cancel_editing)

    def delete(self, task_id: str) -> bool:
        key = delete_request(task_id)
        if not self._begin(key):
            return False
        try:
            self.api.delete_task(task_id)
        except TaskApiError as e:
            logging.debug(f"Failed to delete task {task_id}: {e}")
            self._apply(transitions.show_error, DELETE_FAILED_ERROR)
            return False
        finally:
            self._finish(key)
        self._apply(transitions.task_removed, task_id)
        self._apply(transitions.show_message, TASK_DELETED_MESSAGE)
        return True

    def close(self) -> None:
        self.timer.cancel()
