import os
import json
from typing import Optional


def load_bool(env_var, default: Optional[bool]) -> Optional[bool]:
    env_value = os.environ.get(env_var)
    if env_value is None:
        return default

    return json.loads(env_value.lower())


MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017")
MONGO_DATABASE = os.environ.get("MONGO_DATABASE", "task_manager")
MONGO_COLLECTION = os.environ.get("MONGO_COLLECTION", "tasks")
MONGO_TIMEOUT_MS = int(os.environ.get("MONGO_TIMEOUT_MS", 5000))

# "mongo" or "memory"
TASKS_STORE = os.environ.get("TASKS_STORE", "mongo").strip().lower()

TASKS_HOST = os.environ.get("TASKS_HOST", "0.0.0.0")
TASKS_PORT = int(os.environ.get("PORT", 5000))

TASKS_API_URL = os.environ.get("TASKS_API_URL", "http://localhost:5000/api")
TASKS_REQUEST_TIMEOUT_SECONDS = float(
    os.environ.get("TASKS_REQUEST_TIMEOUT_SECONDS", "10")
)
TASKS_MESSAGE_TIMEOUT_SECONDS = float(
    os.environ.get("TASKS_MESSAGE_TIMEOUT_SECONDS", "3")
)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_PERFORMANCE = os.environ.get("LOG_PERFORMANCE", None)

ENABLE_TELEMETRY = load_bool("ENABLE_TELEMETRY", False)
SENTRY_DSN = os.environ.get("SENTRY_DSN", "")
SENTRY_TRACES_SAMPLE_RATE = float(os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "0.0"))
