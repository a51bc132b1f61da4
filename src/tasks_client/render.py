"""Rich renderables for the task list."""
from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from .state import ClientState, Task

TITLE = "Task List"
LOADING_TEXT = "Loading tasks..."
EMPTY_TEXT = "No tasks yet"
COMPLETED_STYLE = "strike dim"


def task_line(position: int, task: Task) -> Text:
    """One numbered line; completed tasks are struck through."""
    line = Text(f"{position:>3}. ", style="bold cyan")
    line.append("[x] " if task.completed else "[ ] ")
    line.append(task.text, style=COMPLETED_STYLE if task.completed else "")
    return line


def summary_line(state: ClientState) -> Text:
    return Text(f"{state.completed_count} of {len(state.tasks)} tasks completed", style="dim")


def render_state(state: ClientState) -> RenderableType:
    """Build the whole screen for ``state``."""
    parts: list[RenderableType] = []

    if state.error:
        parts.append(Panel(Text(state.error), style="red", title="Error", title_align="left"))

    if state.loading:
        parts.append(Text(LOADING_TEXT, style="italic"))
    elif not state.tasks:
        parts.append(Text(EMPTY_TEXT, style="dim italic"))
    else:
        parts.extend(task_line(i, t) for i, t in enumerate(state.tasks, start=1))
        parts.append(Text(""))
        parts.append(summary_line(state))

    return Panel(Group(*parts), title=TITLE, expand=False)
