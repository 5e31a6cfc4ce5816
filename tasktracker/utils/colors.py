USER_COLOR = "#DEFCC0"  # light green
INFO_COLOR = "green"
HELP_COLOR = "cyan"
ERROR_COLOR = "red"
STATUS_COLOR = "yellow"

TASK_STATUS_COLORS = {
    "pending": "yellow",
    "in-progress": "cyan",
    "completed": "green",
}
