import logging
from enum import Enum
from typing import Optional

import typer
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts.prompt import CompleteStyle
from prompt_toolkit.styles import Style
from rich.console import Console

from tasktracker.core.board_state import BoardState
from tasktracker.core.task_board import TaskBoard
from tasktracker.utils.colors import ERROR_COLOR, HELP_COLOR, STATUS_COLOR, USER_COLOR
from tasktracker.utils.console.result import print_messages, print_tasks

DESCRIPTION_SEPARATOR = "::"


class SlashCommands(Enum):
    EXIT = ("/exit", "Exit interactive mode")
    HELP = ("/help", "Show help message with all commands")
    LIST = ("/list", "Show the cached task list")
    REFRESH = ("/refresh", "Reload tasks from the server")
    ADD = ("/add", "Add a task: /add <title> [:: description] (no args submits the form)")
    CYCLE = ("/cycle", "Advance a task's status: /cycle <#|id>")
    EDIT = ("/edit", "Start editing a task: /edit <#|id>")
    TITLE = ("/title", "Set the title of the task being edited (or of the new task form)")
    DESC = ("/desc", "Set the description of the task being edited (or of the new task form)")
    SAVE = ("/save", "Save the task being edited")
    CANCEL = ("/cancel", "Stop editing without saving")
    DELETE = ("/delete", "Delete a task: /delete <#|id>")

    def __init__(self, command, description):
        self.command = command
        self.description = description


SLASH_COMMANDS_REFERENCE = {cmd.command: cmd.description for cmd in SlashCommands}
ALL_SLASH_COMMANDS = [cmd.command for cmd in SlashCommands]


class SlashCommandCompleter(Completer):
    def __init__(self):
        self.commands = SLASH_COMMANDS_REFERENCE

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if text.startswith("/") and " " not in text:
            word = text
            for cmd, description in self.commands.items():
                if cmd.startswith(word):
                    yield Completion(
                        cmd, start_position=-len(word), display=f"{cmd} - {description}"
                    )


def resolve_task_id(state: BoardState, ref: str) -> Optional[str]:
    """Accepts a 1-based row number from the task table or a task id."""
    ref = ref.strip()
    if not ref:
        return None
    if ref.isdigit():
        index = int(ref)
        if 1 <= index <= len(state.tasks):
            return state.tasks[index - 1].id
    if state.find_task(ref) is not None:
        return ref
    return None


def split_title_and_description(text: str):
    if DESCRIPTION_SEPARATOR in text:
        title, description = text.split(DESCRIPTION_SEPARATOR, 1)
        return title.strip(), description.strip()
    return text.strip(), ""


def match_command(user_input: str, console: Console) -> Optional[str]:
    command = user_input.split(maxsplit=1)[0].lower()
    # prefix matching, e.g. /del -> /delete
    matches = [cmd for cmd in ALL_SLASH_COMMANDS if cmd.startswith(command)]
    if command in ALL_SLASH_COMMANDS:
        return command
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        console.print(
            f"[bold {ERROR_COLOR}]Ambiguous command '{command}'. Matches: {', '.join(matches)}[/bold {ERROR_COLOR}]"
        )
        return None
    console.print(f"Unknown command: {command}")
    return None


def handle_task_command(board: TaskBoard, action, arg: str, console: Console) -> None:
    task_id = resolve_task_id(board.state, arg)
    if task_id is None:
        console.print(
            f"[bold {ERROR_COLOR}]No task matches '{arg}'. Use a row number from /list or a task id.[/bold {ERROR_COLOR}]"
        )
        return
    action(task_id)


def handle_command(board: TaskBoard, user_input: str, console: Console) -> bool:
    """Runs one line of input against the board. Returns False when the user asked to exit."""
    user_input = user_input.strip()
    if not user_input:
        return True

    if not user_input.startswith("/"):
        # bare text is a shortcut for /add
        user_input = f"{SlashCommands.ADD.command} {user_input}"

    command = match_command(user_input, console)
    if command is None:
        return True
    parts = user_input.split(maxsplit=1)
    arg = parts[1] if len(parts) > 1 else ""

    if command == SlashCommands.EXIT.command:
        return False
    elif command == SlashCommands.HELP.command:
        console.print(f"[bold {HELP_COLOR}]Available commands:[/bold {HELP_COLOR}]")
        for cmd, description in SLASH_COMMANDS_REFERENCE.items():
            console.print(f"  [bold]{cmd}[/bold] - {description}")
        console.print("  Any other text adds a task with that title.")
    elif command == SlashCommands.LIST.command:
        print_tasks(board.state, console)
    elif command == SlashCommands.REFRESH.command:
        if board.load():
            print_tasks(board.state, console)
    elif command == SlashCommands.ADD.command:
        if arg:
            title, description = split_title_and_description(arg)
            board.set_form(title=title, description=description)
        if board.create():
            print_tasks(board.state, console)
    elif command == SlashCommands.CYCLE.command:
        handle_task_command(board, board.cycle_status, arg, console)
    elif command == SlashCommands.EDIT.command:
        handle_task_command(board, board.start_editing, arg, console)
        form = board.state.editing
        if form is not None:
            console.print(
                f"[bold {STATUS_COLOR}]Editing task. Use /title, /desc, then /save or /cancel.[/bold {STATUS_COLOR}]"
            )
            console.print(f"  title: {form.title}", markup=False)
            console.print(f"  description: {form.description}", markup=False)
    elif command in (SlashCommands.TITLE.command, SlashCommands.DESC.command):
        field = "title" if command == SlashCommands.TITLE.command else "description"
        if board.state.editing is not None:
            board.set_edit_form(**{field: arg})
        else:
            board.set_form(**{field: arg})
    elif command == SlashCommands.SAVE.command:
        if board.state.editing is None:
            console.print(f"[bold {ERROR_COLOR}]Not editing a task.[/bold {ERROR_COLOR}]")
        elif board.save_edit():
            print_tasks(board.state, console)
    elif command == SlashCommands.CANCEL.command:
        board.cancel_edit()
    elif command == SlashCommands.DELETE.command:
        handle_task_command(board, board.delete, arg, console)
    return True


def run_interactive_loop(board: TaskBoard, console: Console) -> None:
    style = Style.from_dict(
        {
            "prompt": USER_COLOR,
            "bottom-toolbar": "noreverse",
        }
    )

    bindings = KeyBindings()

    @bindings.add("c-c")
    def _(event):
        """Handle Ctrl+C: clear input if text exists, otherwise quit."""
        buffer = event.app.current_buffer
        if buffer.text:
            buffer.reset()
        else:
            raise KeyboardInterrupt()

    def get_bottom_toolbar():
        state = board.state
        if state.error:
            return [("bg:#ff0000 fg:#000000", state.error)]
        if state.message:
            return [("bg:#00aa00 fg:#000000", state.message)]
        if state.loading:
            return [("fg:#aaaa44", "Loading tasks...")]
        if state.editing is not None:
            return [("fg:#aaaa44", f"Editing: {state.editing.title}")]
        return None

    session: PromptSession = PromptSession(
        completer=SlashCommandCompleter(),
        history=InMemoryHistory(),
        complete_style=CompleteStyle.COLUMN,
        key_bindings=bindings,
        bottom_toolbar=get_bottom_toolbar,
    )

    # redraw the toolbar when a message appears or expires while waiting for input
    board.on_change = lambda _state: session.app.invalidate()

    console.print(
        f"[bold {HELP_COLOR}]Task Manager.[/bold {HELP_COLOR}] Type /help for commands, /exit or Ctrl+C to quit."
    )
    board.load()
    print_messages(board.state, console)
    print_tasks(board.state, console)

    input_prompt = [("class:prompt", "tasks> ")]
    while True:
        try:
            user_input = session.prompt(input_prompt, style=style)
            if not handle_command(board, user_input, console):
                break
        except (typer.Abort, EOFError, KeyboardInterrupt):
            break
        except Exception as e:
            logging.error("An error occurred during interactive mode:", exc_info=e)
            console.print(f"[bold {ERROR_COLOR}]Error: {e}[/bold {ERROR_COLOR}]")

    board.close()
    console.print(f"[bold {STATUS_COLOR}]Exiting interactive mode.[/bold {STATUS_COLOR}]")
