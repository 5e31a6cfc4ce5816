import pytest
import yaml

from tasktracker.config import Config, StoreType
from tasktracker.core.memory_dal import InMemoryTaskRepository
from tasktracker.core.mongo_dal import MongoTaskRepository


def test_load_from_env(monkeypatch):
    monkeypatch.setenv("TASKS_STORE", "memory")
    monkeypatch.setenv("MONGO_URI", "mongodb://db.internal:27017")
    monkeypatch.setenv("MONGO_DATABASE", "tasks_test")

    config = Config.load_from_env()

    assert config.store == StoreType.MEMORY
    assert config.mongo_uri == "mongodb://db.internal:27017"
    assert config.mongo_database == "tasks_test"


def test_invalid_store_is_rejected(monkeypatch):
    monkeypatch.setenv("TASKS_STORE", "postgres")
    with pytest.raises(ValueError):
        Config.load_from_env()


def test_create_memory_repository():
    assert isinstance(Config(store="memory").create_repository(), InMemoryTaskRepository)


def test_create_mongo_repository():
    # MongoClient connects lazily, so no server is needed here
    repository = Config(store="mongo", mongo_uri="mongodb://localhost:1").create_repository()
    try:
        assert isinstance(repository, MongoTaskRepository)
        assert repository.collection.name == "tasks"
    finally:
        repository.close()


def test_load_from_file_with_cli_overrides(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        yaml.dump({"api_url": "http://from-file/api", "request_timeout_seconds": 4})
    )

    config = Config.load_from_file(config_file, api_url="http://from-cli/api", request_timeout_seconds=None)

    assert config.api_url == "http://from-cli/api"
    assert config.request_timeout_seconds == 4


def test_load_from_missing_file(tmp_path):
    config = Config.load_from_file(tmp_path / "missing.yaml", api_url="http://x/api")
    assert config.api_url == "http://x/api"


def test_create_api_client():
    client = Config(api_url="http://x/api/", request_timeout_seconds=1.5).create_api_client()
    assert client.api_url == "http://x/api"
    assert client.timeout == 1.5
