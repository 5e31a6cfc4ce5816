from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tasktracker.core.board_state import BoardState
from tasktracker.core.models import Task
from tasktracker.utils.colors import ERROR_COLOR, INFO_COLOR, TASK_STATUS_COLORS


def build_tasks_table(tasks: Iterable[Task], editing_id: Optional[str] = None) -> Table:
    table = Table(show_lines=False, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Description")
    table.add_column("Status")
    table.add_column("ID", style="dim")

    for i, task in enumerate(tasks, start=1):
        status = task.status.value
        color = TASK_STATUS_COLORS.get(status, "white")
        # task text is user supplied; keep rich from reading it as markup
        title = escape(task.title)
        if task.id == editing_id:
            title = f"{title} (editing)"
        table.add_row(
            str(i),
            title,
            escape(task.description),
            f"[{color}]{status}[/{color}]",
            task.id,
        )
    return table


def print_tasks(state: BoardState, console: Console) -> None:
    if state.loading:
        console.print("Loading tasks...")
        return
    if not state.tasks:
        console.print("[dim]No tasks yet. Add one with /add <title>[/dim]")
        return
    editing_id = state.editing.task_id if state.editing else None
    console.print(build_tasks_table(state.tasks, editing_id))


def print_messages(state: BoardState, console: Console) -> None:
    if state.error:
        console.print(f"[bold {ERROR_COLOR}]{state.error}[/bold {ERROR_COLOR}]")
    if state.message:
        console.print(f"[bold {INFO_COLOR}]{state.message}[/bold {INFO_COLOR}]")
