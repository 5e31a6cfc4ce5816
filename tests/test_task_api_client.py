import json

import pytest
import requests

from tasktracker.clients.task_api_client import TaskApiClient, TaskApiError
from tasktracker.core.models import TaskStatus
from tests.mocks.task_mocks import API_URL, task_json


def test_list_tasks(responses, api_client):
    responses.get(
        f"{API_URL}/tasks",
        json=[task_json("a", title="first"), task_json("b", title="second")],
    )

    tasks = api_client.list_tasks()

    assert [task.id for task in tasks] == ["a", "b"]
    assert tasks[0].title == "first"


def test_create_task_sends_form_fields(responses, api_client):
    responses.post(f"{API_URL}/tasks", json=task_json("a", description="2 litres"), status=201)

    task = api_client.create_task("Buy milk", "2 litres")

    assert json.loads(responses.calls[0].request.body) == {
        "title": "Buy milk",
        "description": "2 litres",
    }
    assert task.status == TaskStatus.PENDING


def test_create_task_with_status(responses, api_client):
    responses.post(
        f"{API_URL}/tasks", json=task_json("a", status=TaskStatus.COMPLETED), status=201
    )

    api_client.create_task("Buy milk", status=TaskStatus.COMPLETED)

    assert json.loads(responses.calls[0].request.body)["status"] == "completed"


def test_update_task_sends_only_given_fields(responses, api_client):
    responses.put(
        f"{API_URL}/tasks/a", json=task_json("a", status=TaskStatus.IN_PROGRESS)
    )

    task = api_client.update_task("a", status=TaskStatus.IN_PROGRESS)

    assert json.loads(responses.calls[0].request.body) == {"status": "in-progress"}
    assert task.status == TaskStatus.IN_PROGRESS


def test_delete_task(responses, api_client):
    responses.delete(f"{API_URL}/tasks/a", json={"message": "Task deleted"})

    assert api_client.delete_task("a") == "Task deleted"


def test_not_found_carries_server_message(responses, api_client):
    responses.put(f"{API_URL}/tasks/a", json={"message": "Task not found"}, status=404)

    with pytest.raises(TaskApiError) as exc_info:
        api_client.update_task("a", title="x")

    assert exc_info.value.status_code == 404
    assert exc_info.value.is_not_found
    assert exc_info.value.message == "Task not found"


def test_server_error_without_json_body(responses, api_client):
    responses.get(f"{API_URL}/tasks", body="Internal Server Error", status=500)

    with pytest.raises(TaskApiError) as exc_info:
        api_client.list_tasks()

    assert exc_info.value.status_code == 500


def test_timeout_raises_api_error(responses, api_client):
    responses.get(f"{API_URL}/tasks", body=requests.Timeout("read timed out"))

    with pytest.raises(TaskApiError) as exc_info:
        api_client.list_tasks()

    assert "timed out" in exc_info.value.message
    assert exc_info.value.status_code is None


def test_connection_error_raises_api_error(responses, api_client):
    responses.delete(
        f"{API_URL}/tasks/a", body=requests.ConnectionError("connection refused")
    )

    with pytest.raises(TaskApiError):
        api_client.delete_task("a")


def test_malformed_task_list(responses, api_client):
    responses.get(f"{API_URL}/tasks", json={"message": "not a list"})

    with pytest.raises(TaskApiError):
        api_client.list_tasks()


def test_invalid_task_in_response(responses, api_client):
    responses.post(f"{API_URL}/tasks", json={"title": "no id"}, status=201)

    with pytest.raises(TaskApiError):
        api_client.create_task("Buy milk")


def test_api_url_trailing_slash(responses):
    responses.get(f"{API_URL}/tasks", json=[])

    assert TaskApiClient(f"{API_URL}/").list_tasks() == []
