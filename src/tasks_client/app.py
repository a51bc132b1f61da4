from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .api import ApiError, TasksClient
from .state import (
    Action,
    ClientState,
    InputChanged,
    LoadFailed,
    LoadSucceeded,
    RequestFailed,
    TaskAdded,
    TaskDeleted,
    TaskToggled,
    reduce,
)

logger = logging.getLogger(__name__)

Listener = Callable[[ClientState], None]


class TodoApp:
    """
    Client controller: one request per user action, then reconcile local state.

    Failed requests never raise out of here; they become ``state.error``.
    Overlapping requests are not serialized, so responses apply in arrival order
    and a later full ``load()`` is the only resync with the server.
    """

    def __init__(self, client: TasksClient, state: Optional[ClientState] = None) -> None:
        self.client = client
        self.state = state or ClientState()
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener`` with the new state after every transition."""
        self._listeners.append(listener)

    def dispatch(self, action: Action) -> ClientState:
        self.state = reduce(self.state, action)
        for listener in self._listeners:
            listener(self.state)
        return self.state

    def _fail(self, prefix: str, exc: ApiError) -> None:
        logger.error("%s %s", prefix, exc.message)
        self.dispatch(RequestFailed(f"{prefix} {exc.message}"))

    async def load(self) -> None:
        """Fetch the full list and replace local tasks with it."""
        try:
            tasks = await self.client.list_tasks()
        except ApiError as exc:
            message = f"Could not load tasks. {exc.message}"
            logger.error("%s", message)
            # Only the initial fetch starts from an empty list; a failed reload keeps what is shown.
            self.dispatch(LoadFailed(message) if self.state.loading else RequestFailed(message))
            return
        self.dispatch(LoadSucceeded(tuple(tasks)))

    def set_input(self, text: str) -> None:
        self.dispatch(InputChanged(text))

    async def add(self) -> None:
        """Create a task from the input buffer; blank input is ignored."""
        text = self.state.new_task_text
        if text.strip() == "":
            return
        try:
            task = await self.client.create_task(text, completed=False)
        except ApiError as exc:
            self._fail("Could not add the task.", exc)
            return
        self.dispatch(TaskAdded(task))

    async def toggle(self, task_id: str) -> None:
        """Flip ``completed`` on the server, then flip the local copy."""
        task = self.state.find(task_id)
        if task is None:
            logger.warning("Toggle ignored, task %s is not in the local list", task_id)
            return
        try:
            await self.client.update_task(task_id, completed=not task.completed)
        except ApiError as exc:
            self._fail("Could not update the task.", exc)
            return
        self.dispatch(TaskToggled(task_id))

    async def delete(self, task_id: str) -> None:
        """Delete on the server, then drop the local copy."""
        try:
            await self.client.delete_task(task_id)
        except ApiError as exc:
            self._fail("Could not delete the task.", exc)
            return
        self.dispatch(TaskDeleted(task_id))
