import logging
import time
from typing import List

import colorlog
import sentry_sdk
import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tasktracker import get_version, is_official_release
from tasktracker.common.env_vars import (
    ENABLE_TELEMETRY,
    LOG_LEVEL,
    LOG_PERFORMANCE,
    SENTRY_DSN,
    SENTRY_TRACES_SAMPLE_RATE,
    TASKS_HOST,
    TASKS_PORT,
)
from tasktracker.config import Config
from tasktracker.core.models import MessageResponse, Task, TaskCreate, TaskUpdate
from tasktracker.core.task_repository import (
    StorageError,
    TaskNotFoundError,
    TaskValidationError,
)
from tasktracker.utils.pydantic_utils import format_error_details

WELCOME_TEXT = "Welcome to Task Manager API"
TASK_NOT_FOUND = "Task not found"


def init_logging():
    logging_level = LOG_LEVEL
    logging_format = "%(log_color)s%(asctime)s.%(msecs)03d %(levelname)-8s %(message)s"
    logging_datefmt = "%Y-%m-%d %H:%M:%S"

    colorlog.basicConfig(
        format=logging_format, level=logging_level, datefmt=logging_datefmt
    )
    logging.getLogger().setLevel(logging_level)

    for noisy_logger in ["pymongo", "httpx"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    logging.info(f"logger initialized using {logging_level} log level")


init_logging()
config = Config.load_from_env()
repository = config.create_repository()


def check_store_connection():
    try:
        repository.check_connection()
        logging.info(f"Connected to {config.store.value} task store")
    except StorageError:
        logging.error("Task store connection error", exc_info=True)


if ENABLE_TELEMETRY and SENTRY_DSN:
    if is_official_release():
        logging.info("Initializing sentry...")
        sentry_sdk.init(
            dsn=SENTRY_DSN,
            send_default_pii=False,
            traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
            profiles_sample_rate=0,
        )
        sentry_sdk.set_tags(
            {
                "store": config.store.value,
                "version": get_version(),
            }
        )
    else:
        logging.info("Skipping sentry initialization for custom version")

app = FastAPI(title="Task Manager API", version=get_version())
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


if LOG_PERFORMANCE:

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            process_time = int((time.time() - start_time) * 1000)

            status_code = "unknown"
            if response:
                status_code = response.status_code
            logging.info(
                f"Request completed {request.method} {request.url.path} status={status_code} latency={process_time}ms"
            )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # routes raise HTTPException(detail={"message": ...}); send the detail as the body
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    if request.method == "POST":
        message = "Error creating task"
    elif request.method == "PUT":
        message = "Error updating task"
    else:
        message = "Invalid request"
    body = MessageResponse(message=message, error=format_error_details(exc.errors()))
    return JSONResponse(status_code=400, content=body.model_dump())


def error_detail(message: str, error=None) -> dict:
    return MessageResponse(message=message, error=error).model_dump(exclude_none=True)


@app.get("/", response_class=PlainTextResponse)
def welcome():
    return WELCOME_TEXT


@app.get("/api/tasks", response_model=List[Task])
def get_tasks():
    try:
        return repository.list_tasks()
    except Exception as e:
        logging.error(f"Error in GET /api/tasks: {e}", exc_info=True)
        sentry_sdk.capture_exception(e)
        raise HTTPException(
            status_code=500, detail=error_detail("Error fetching tasks", str(e))
        )


@app.post("/api/tasks", response_model=Task, status_code=201)
def create_task(task: TaskCreate):
    try:
        return repository.create_task(task)
    except TaskValidationError as e:
        raise HTTPException(
            status_code=400, detail=error_detail("Error creating task", e.errors)
        )
    except Exception as e:
        logging.error(f"Error in POST /api/tasks: {e}", exc_info=True)
        sentry_sdk.capture_exception(e)
        raise HTTPException(
            status_code=500, detail=error_detail("Error creating task", str(e))
        )


@app.put("/api/tasks/{task_id}", response_model=Task)
def update_task(task_id: str, update: TaskUpdate):
    try:
        return repository.update_task(task_id, update)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail=error_detail(TASK_NOT_FOUND))
    except TaskValidationError as e:
        raise HTTPException(
            status_code=400, detail=error_detail("Error updating task", e.errors)
        )
    except Exception as e:
        logging.error(f"Error in PUT /api/tasks/{task_id}: {e}", exc_info=True)
        sentry_sdk.capture_exception(e)
        raise HTTPException(
            status_code=500, detail=error_detail("Error updating task", str(e))
        )


@app.delete(
    "/api/tasks/{task_id}",
    response_model=MessageResponse,
    response_model_exclude_none=True,
)
def delete_task(task_id: str):
    try:
        repository.delete_task(task_id)
    except TaskNotFoundError:
        raise HTTPException(status_code=404, detail=error_detail(TASK_NOT_FOUND))
    except Exception as e:
        logging.error(f"Error in DELETE /api/tasks/{task_id}: {e}", exc_info=True)
        sentry_sdk.capture_exception(e)
        raise HTTPException(
            status_code=500, detail=error_detail("Error deleting task", str(e))
        )
    return MessageResponse(message="Task deleted")


def run_server(host: str = TASKS_HOST, port: int = TASKS_PORT):
    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["access"]["fmt"] = (
        "%(asctime)s %(levelname)-8s %(message)s"
    )
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(levelname)-8s %(message)s"
    )
    check_store_connection()
    logging.info(f"Server running on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=log_config)


if __name__ == "__main__":
    run_server()
