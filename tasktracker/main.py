import sys
from pathlib import Path
from typing import List, Optional

import typer

from tasktracker import get_version  # type: ignore
from tasktracker.clients.task_api_client import TaskApiClient, TaskApiError
from tasktracker.config import DEFAULT_CONFIG_LOCATION, Config
from tasktracker.core.board_state import BoardState
from tasktracker.core.models import TaskStatus, next_status
from tasktracker.core.task_board import TaskBoard
from tasktracker.interactive import run_interactive_loop
from tasktracker.utils.colors import ERROR_COLOR, INFO_COLOR
from tasktracker.utils.console.logging import init_logging
from tasktracker.utils.console.result import print_tasks

app = typer.Typer(add_completion=False, pretty_exceptions_show_locals=False)


# Common cli options
# The defaults for options that are also in the config file MUST be None or else the cli defaults will override settings in the config file
opt_api_url: Optional[str] = typer.Option(
    None,
    "--api-url",
    help="Base url of the task API, e.g. http://localhost:5000/api (defaults to TASKS_API_URL)",
)
opt_timeout: Optional[float] = typer.Option(
    None,
    "--timeout",
    help="Seconds to wait for each request before giving up",
)
opt_config_file: Optional[Path] = typer.Option(
    DEFAULT_CONFIG_LOCATION,  # type: ignore
    "--config",
    help="Path to the config file. Defaults to ~/.tasktracker/config.yaml when it exists. Command line arguments take precedence over config file settings",
)
opt_verbose: Optional[List[bool]] = typer.Option(
    [],
    "--verbose",
    "-v",
    help="Verbose output. You can pass multiple times to increase the verbosity. e.g. -v or -vv",
)


def load_client(
    config_file: Optional[Path], api_url: Optional[str], timeout: Optional[float]
) -> TaskApiClient:
    config = Config.load_from_file(
        config_file, api_url=api_url, request_timeout_seconds=timeout
    )
    return config.create_api_client()


def fail(console, message: str, error: TaskApiError):
    console.print(f"[bold {ERROR_COLOR}]{message}[/bold {ERROR_COLOR}] {error.message}")
    raise typer.Exit(code=1)


def find_task_id(client: TaskApiClient, console, ref: str) -> str:
    """Resolves a row number from `list` to a task id; anything else is used as an id."""
    if not ref.isdigit():
        return ref
    try:
        tasks = client.list_tasks()
    except TaskApiError as e:
        fail(console, "Failed to fetch tasks.", e)
    index = int(ref)
    if 1 <= index <= len(tasks):
        return tasks[index - 1].id
    return ref


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Address to listen on (defaults to TASKS_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port to listen on (defaults to PORT)"),
):
    """
    Run the task API server
    """
    # importing the server configures logging and connects the task store
    import server

    server.run_server(host=host or server.TASKS_HOST, port=port or server.TASKS_PORT)


@app.command()
def ui(
    api_url: Optional[str] = opt_api_url,
    timeout: Optional[float] = opt_timeout,
    config_file: Optional[Path] = opt_config_file,
    verbose: Optional[List[bool]] = opt_verbose,
):
    """
    Manage tasks interactively
    """
    console = init_logging(verbose)
    config = Config.load_from_file(
        config_file, api_url=api_url, request_timeout_seconds=timeout
    )
    board = TaskBoard(
        config.create_api_client(), message_timeout=config.message_timeout_seconds
    )
    run_interactive_loop(board, console)


@app.command("list")
def list_tasks(
    api_url: Optional[str] = opt_api_url,
    timeout: Optional[float] = opt_timeout,
    config_file: Optional[Path] = opt_config_file,
    verbose: Optional[List[bool]] = opt_verbose,
):
    """
    List all tasks
    """
    console = init_logging(verbose)
    client = load_client(config_file, api_url, timeout)
    try:
        tasks = client.list_tasks()
    except TaskApiError as e:
        fail(console, "Failed to fetch tasks.", e)
    print_tasks(BoardState(tasks=tuple(tasks)), console)


@app.command()
def add(
    title: str = typer.Argument(help="Title of the new task"),
    description: str = typer.Option("", "--description", "-d", help="Task description"),
    status: Optional[TaskStatus] = typer.Option(None, help="Initial status (defaults to pending)"),
    api_url: Optional[str] = opt_api_url,
    timeout: Optional[float] = opt_timeout,
    config_file: Optional[Path] = opt_config_file,
    verbose: Optional[List[bool]] = opt_verbose,
):
    """
    Add a task
    """
    console = init_logging(verbose)
    if not title.strip():
        raise typer.BadParameter("Title is required.")
    client = load_client(config_file, api_url, timeout)
    try:
        task = client.create_task(title, description, status)
    except TaskApiError as e:
        fail(console, "Failed to add task.", e)
    console.print(f"[bold {INFO_COLOR}]Task added successfully![/bold {INFO_COLOR}] {task.id}")


@app.command()
def status(
    task: str = typer.Argument(help="Row number from `list` or task id"),
    set_status: Optional[TaskStatus] = typer.Option(
        None, "--set", help="Set this status instead of advancing to the next one"
    ),
    api_url: Optional[str] = opt_api_url,
    timeout: Optional[float] = opt_timeout,
    config_file: Optional[Path] = opt_config_file,
    verbose: Optional[List[bool]] = opt_verbose,
):
    """
    Advance a task to its next status (pending -> in-progress -> completed -> pending)
    """
    console = init_logging(verbose)
    client = load_client(config_file, api_url, timeout)
    task_id = find_task_id(client, console, task)
    try:
        if set_status is None:
            current = next((t for t in client.list_tasks() if t.id == task_id), None)
            if current is None:
                console.print(f"[bold {ERROR_COLOR}]Task not found.[/bold {ERROR_COLOR}]")
                raise typer.Exit(code=1)
            set_status = next_status(current.status)
        updated = client.update_task(task_id, status=set_status)
    except TaskApiError as e:
        fail(console, "Status update failed.", e)
    console.print(
        f"[bold {INFO_COLOR}]Status updated![/bold {INFO_COLOR}] {updated.title}: {updated.status.value}"
    )


@app.command()
def update(
    task: str = typer.Argument(help="Row number from `list` or task id"),
    title: Optional[str] = typer.Option(None, help="New title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    api_url: Optional[str] = opt_api_url,
    timeout: Optional[float] = opt_timeout,
    config_file: Optional[Path] = opt_config_file,
    verbose: Optional[List[bool]] = opt_verbose,
):
    """
    Change a task's title and/or description. Fields that aren't given are left unchanged
    """
    console = init_logging(verbose)
    fields = {}
    if title is not None:
        if not title.strip():
            raise typer.BadParameter("Title is required.")
        fields["title"] = title
    if description is not None:
        fields["description"] = description
    if not fields:
        raise typer.BadParameter("Nothing to update. Pass --title and/or --description.")
    client = load_client(config_file, api_url, timeout)
    task_id = find_task_id(client, console, task)
    try:
        client.update_task(task_id, **fields)
    except TaskApiError as e:
        fail(console, "Update failed.", e)
    console.print(f"[bold {INFO_COLOR}]Task updated successfully![/bold {INFO_COLOR}]")


@app.command()
def delete(
    task: str = typer.Argument(help="Row number from `list` or task id"),
    api_url: Optional[str] = opt_api_url,
    timeout: Optional[float] = opt_timeout,
    config_file: Optional[Path] = opt_config_file,
    verbose: Optional[List[bool]] = opt_verbose,
):
    """
    Delete a task
    """
    console = init_logging(verbose)
    client = load_client(config_file, api_url, timeout)
    task_id = find_task_id(client, console, task)
    try:
        client.delete_task(task_id)
    except TaskApiError as e:
        fail(console, "Delete failed.", e)
    console.print(f"[bold {INFO_COLOR}]Task deleted![/bold {INFO_COLOR}]")


@app.command()
def version() -> None:
    typer.echo(get_version())


def run():
    app()


if __name__ == "__main__":
    sys.exit(run())
