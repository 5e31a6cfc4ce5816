import logging
import os
import os.path
from enum import Enum
from pathlib import Path
from typing import Optional

from tasktracker.common.env_vars import (
    MONGO_COLLECTION,
    MONGO_DATABASE,
    MONGO_TIMEOUT_MS,
    MONGO_URI,
    TASKS_API_URL,
    TASKS_MESSAGE_TIMEOUT_SECONDS,
    TASKS_REQUEST_TIMEOUT_SECONDS,
    TASKS_STORE,
)
from tasktracker.core.task_repository import TaskRepository
from tasktracker.utils.pydantic_utils import TaskTrackerBaseConfig, load_model_from_file

config_path_dir = os.path.expanduser("~/.tasktracker")
DEFAULT_CONFIG_LOCATION = os.path.join(config_path_dir, "config.yaml")


class StoreType(str, Enum):
    MONGO = "mongo"
    MEMORY = "memory"


class Config(TaskTrackerBaseConfig):
    # server side
    store: StoreType = TASKS_STORE  # type: ignore
    mongo_uri: str = MONGO_URI
    mongo_database: str = MONGO_DATABASE
    mongo_collection: str = MONGO_COLLECTION
    mongo_timeout_ms: int = MONGO_TIMEOUT_MS

    # client side
    api_url: str = TASKS_API_URL
    request_timeout_seconds: float = TASKS_REQUEST_TIMEOUT_SECONDS
    message_timeout_seconds: float = TASKS_MESSAGE_TIMEOUT_SECONDS

    @classmethod
    def load_from_file(cls, config_file: Optional[Path], **kwargs) -> "Config":
        """
        Load configuration from file and merge with CLI options.

        Args:
            config_file: Path to configuration file
            **kwargs: CLI options to override config file values

        Returns:
            Config instance with merged settings
        """
        config_from_file: Optional[Config] = None
        if config_file is not None and config_file.exists():
            logging.debug(f"Loading config from {config_file}")
            config_from_file = load_model_from_file(cls, config_file)

        cli_options = {k: v for k, v in kwargs.items() if v is not None}

        if config_from_file is None:
            return cls(**cli_options)

        logging.debug(f"Overriding config from cli options {cli_options}")
        merged_config = config_from_file.model_dump()
        merged_config.update(cli_options)
        return cls(**merged_config)

    @classmethod
    def load_from_env(cls) -> "Config":
        kwargs = {}
        for field_name, env_var in [
            ("store", "TASKS_STORE"),
            ("mongo_uri", "MONGO_URI"),
            ("mongo_database", "MONGO_DATABASE"),
            ("mongo_collection", "MONGO_COLLECTION"),
            ("api_url", "TASKS_API_URL"),
        ]:
            val = os.getenv(env_var, None)
            if val is not None:
                kwargs[field_name] = val.strip()
        return cls(**kwargs)

    def create_repository(self) -> TaskRepository:
        if self.store == StoreType.MEMORY:
            from tasktracker.core.memory_dal import InMemoryTaskRepository

            return InMemoryTaskRepository()

        from tasktracker.core.mongo_dal import MongoTaskRepository

        return MongoTaskRepository.from_uri(
            self.mongo_uri,
            self.mongo_database,
            self.mongo_collection,
            self.mongo_timeout_ms,
        )

    def create_api_client(self):
        from tasktracker.clients.task_api_client import TaskApiClient

        return TaskApiClient(self.api_url, timeout=self.request_timeout_seconds)
