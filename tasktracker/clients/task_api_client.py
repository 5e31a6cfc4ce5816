import logging
from typing import Any, Dict, List, Optional

import requests  # type: ignore
from pydantic import ValidationError

from tasktracker.core.models import Task, TaskStatus

DEFAULT_TIMEOUT = 10


class TaskApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class TaskApiClient:
    """REST client for the task API. Every request carries a timeout."""

    def __init__(
        self,
        api_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logging.debug(f"{method} {url} timed out after {self.timeout}s")
            raise TaskApiError(f"Request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            logging.debug(f"{method} {url} failed: {e}")
            raise TaskApiError(f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            message = response.reason or "Request failed"
            if isinstance(body, dict) and body.get("message"):
                message = body["message"]
            raise TaskApiError(message, status_code=response.status_code)

        if body is None:
            raise TaskApiError(
                "Server returned a malformed response",
                status_code=response.status_code,
            )
        return body

    @staticmethod
    def _parse_task(data: Any) -> Task:
        try:
            return Task.model_validate(data)
        except ValidationError as e:
            raise TaskApiError(f"Server returned an invalid task: {e}") from e

    def list_tasks(self) -> List[Task]:
        body = self._request("GET", "/tasks")
        if not isinstance(body, list):
            raise TaskApiError("Server returned a malformed task list")
        return [self._parse_task(item) for item in body]

    def create_task(
        self,
        title: str,
        description: str = "",
        status: Optional[TaskStatus] = None,
    ) -> Task:
        payload: Dict[str, Any] = {"title": title, "description": description}
        if status is not None:
            payload["status"] = TaskStatus(status).value
        return self._parse_task(self._request("POST", "/tasks", json=payload))

    def update_task(self, task_id: str, **fields: Any) -> Task:
        payload = {
            key: (value.value if isinstance(value, TaskStatus) else value)
            for key, value in fields.items()
        }
        return self._parse_task(
            self._request("PUT", f"/tasks/{task_id}", json=payload)
        )

    def delete_task(self, task_id: str) -> str:
        body = self._request("DELETE", f"/tasks/{task_id}")
        return body.get("message", "") if isinstance(body, dict) else ""

    def close(self) -> None:
        self.session.close()
