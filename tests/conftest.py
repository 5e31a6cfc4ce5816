from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from tasktracker.clients.task_api_client import TaskApiClient
from tasktracker.core.memory_dal import InMemoryTaskRepository
from tasktracker.core.task_board import TaskBoard
from tests.mocks.task_mocks import API_URL


@pytest.fixture
def repository():
    return InMemoryTaskRepository()


@pytest.fixture
def client(repository):
    from server import app

    with patch("server.repository", repository):
        yield TestClient(app)


@pytest.fixture
def api_client():
    return TaskApiClient(API_URL, timeout=2)


@pytest.fixture
def mock_api():
    return MagicMock(spec=TaskApiClient)


@pytest.fixture
def board(mock_api):
    board = TaskBoard(mock_api, message_timeout=60)
    board.timer = MagicMock()
    yield board
    board.close()
