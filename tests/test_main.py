import json

import pytest
from typer.testing import CliRunner

from tasktracker.main import app
from tests.mocks.task_mocks import API_URL, task_json

runner = CliRunner()


@pytest.fixture
def common_args(tmp_path):
    return ["--api-url", API_URL, "--config", str(tmp_path / "missing.yaml")]


def test_list(responses, common_args):
    responses.get(f"{API_URL}/tasks", json=[task_json("a", title="Buy milk")])

    result = runner.invoke(app, ["list", *common_args])

    assert result.exit_code == 0, result.output
    assert "Buy milk" in result.output


def test_list_failure_exits_nonzero(responses, common_args):
    responses.get(f"{API_URL}/tasks", json={"message": "Error fetching tasks"}, status=500)

    result = runner.invoke(app, ["list", *common_args])

    assert result.exit_code == 1
    assert "Failed to fetch tasks." in result.output


def test_add(responses, common_args):
    responses.post(f"{API_URL}/tasks", json=task_json("a"), status=201)

    result = runner.invoke(app, ["add", "Buy milk", "-d", "2 litres", *common_args])

    assert result.exit_code == 0, result.output
    assert json.loads(responses.calls[0].request.body) == {
        "title": "Buy milk",
        "description": "2 litres",
    }


def test_add_empty_title_sends_nothing(responses, common_args):
    result = runner.invoke(app, ["add", "  ", *common_args])

    assert result.exit_code != 0
    assert len(responses.calls) == 0


def test_status_cycles_by_row_number(responses, common_args):
    responses.get(f"{API_URL}/tasks", json=[task_json("a", status="in-progress")])
    responses.put(f"{API_URL}/tasks/a", json=task_json("a", status="completed"))

    result = runner.invoke(app, ["status", "1", *common_args])

    assert result.exit_code == 0, result.output
    assert json.loads(responses.calls[-1].request.body) == {"status": "completed"}


def test_update_sends_only_given_fields(responses, common_args):
    responses.put(f"{API_URL}/tasks/abc", json=task_json("abc", description="new"))

    result = runner.invoke(app, ["update", "abc", "-d", "new", *common_args])

    assert result.exit_code == 0, result.output
    assert json.loads(responses.calls[0].request.body) == {"description": "new"}


def test_delete_not_found(responses, common_args):
    responses.delete(f"{API_URL}/tasks/abc", json={"message": "Task not found"}, status=404)

    result = runner.invoke(app, ["delete", "abc", *common_args])

    assert result.exit_code == 1
    assert "Task not found" in result.output
