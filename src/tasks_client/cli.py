"""Interactive terminal client.

Commands:
- add <text>     create a task
- toggle <n>     flip completion of task number n
- delete <n>     delete task number n
- reload         fetch the list again
- quit           leave
"""
from __future__ import annotations

import asyncio
import os
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape

from .api import DEFAULT_API_URL, TasksClient
from .app import TodoApp
from .logging_setup import setup_logging
from .render import render_state
from .state import Task

HELP_TEXT = "Commands: add <text> | toggle <n> | delete <n> | reload | quit"


def parse_command(line: str) -> Tuple[str, str]:
    """Split ``line`` into a lower-cased verb and the raw remainder."""
    verb, _, rest = line.strip().partition(" ")
    return verb.lower(), rest.strip()


def _task_at(app: TodoApp, arg: str) -> Optional[Task]:
    try:
        index = int(arg)
    except ValueError:
        return None
    if 1 <= index <= len(app.state.tasks):
        return app.state.tasks[index - 1]
    return None


async def handle_command(app: TodoApp, line: str, console: Console) -> bool:
    """Run one command line against ``app``. Return False when the user quits."""
    verb, arg = parse_command(line)
    if verb in {"quit", "exit", "q"}:
        return False
    if verb == "":
        return True
    if verb == "add":
        app.set_input(arg)
        await app.add()
    elif verb in {"toggle", "delete"}:
        task = _task_at(app, arg)
        if task is None:
            console.print(f"[yellow]No task number {escape(repr(arg))}[/yellow]")
        elif verb == "toggle":
            await app.toggle(task.id)
        else:
            await app.delete(task.id)
    elif verb == "reload":
        await app.load()
    else:
        console.print(f"[yellow]Unknown command {escape(repr(verb))}.[/yellow] {HELP_TEXT}")
    return True


async def _session(api_url: str, console: Console) -> None:
    app = TodoApp(TasksClient(base_url=api_url))
    console.print(render_state(app.state))
    await app.load()
    while True:
        console.print(render_state(app.state))
        try:
            line = await asyncio.to_thread(console.input, "[bold]> [/bold]")
        except EOFError:
            break
        if not await handle_command(app, line, console):
            break


@click.command("tasks-client")
@click.option(
    "--api-url",
    default=lambda: os.getenv("TASKS_API_URL", DEFAULT_API_URL),
    show_default="$TASKS_API_URL or " + DEFAULT_API_URL,
    help="URL of the /api/tasks collection",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=os.path.join(".local", "tasks-client.log"),
    show_default=True,
    help="Where to write client logs",
)
def main(api_url: str, log_file: str) -> None:
    """Manage the task list from the terminal."""
    setup_logging(log_file)
    console = Console()
    console.print(HELP_TEXT, style="dim")
    try:
        asyncio.run(_session(api_url, console))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
