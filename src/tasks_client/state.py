from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple, Union


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Task:
    """
    Local mirror of a server task.

    ``created_at`` keeps the server's raw ``createdAt`` string so it goes back
    out exactly as it came in.
    """

    id: str
    text: str
    completed: bool
    created_at: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            completed=bool(data["completed"]),
            created_at=str(data["createdAt"]),
        )


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ClientState:
    """
    Whole client state. Never mutated; every action produces a new instance.

    - tasks: mirrors the server list order at last sync, plus local patches
    - new_task_text: pending input buffer
    - loading: True while the initial list fetch is in flight
    - error: user-facing message from the last failed call, if any
    """

    tasks: Tuple[Task, ...] = ()
    new_task_text: str = ""
    loading: bool = True
    error: Optional[str] = None

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    def find(self, task_id: str) -> Optional[Task]:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None


@dataclass(frozen=True)
class LoadSucceeded:
    tasks: Tuple[Task, ...]


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class InputChanged:
    text: str


@dataclass(frozen=True)
class TaskAdded:
    task: Task


@dataclass(frozen=True)
class TaskToggled:
    task_id: str


@dataclass(frozen=True)
class TaskDeleted:
    task_id: str


@dataclass(frozen=True)
class RequestFailed:
    message: str


Action = Union[
    LoadSucceeded,
    LoadFailed,
    InputChanged,
    TaskAdded,
    TaskToggled,
    TaskDeleted,
    RequestFailed,
]


# PUBLIC_INTERFACE
def reduce(state: ClientState, action: Action) -> ClientState:
    """
    Return the state that follows ``state`` once ``action`` has happened.

    Successful server round-trips clear ``error``; ``RequestFailed`` sets it and
    changes nothing else.
    """
    if isinstance(action, LoadSucceeded):
        return replace(state, tasks=tuple(action.tasks), loading=False, error=None)

    if isinstance(action, LoadFailed):
        return replace(state, tasks=(), loading=False, error=action.message)

    if isinstance(action, InputChanged):
        return replace(state, new_task_text=action.text)

    if isinstance(action, TaskAdded):
        return replace(state, tasks=state.tasks + (action.task,), new_task_text="", error=None)

    if isinstance(action, TaskToggled):
        tasks = tuple(
            replace(t, completed=not t.completed) if t.id == action.task_id else t
            for t in state.tasks
        )
        return replace(state, tasks=tasks, error=None)

    if isinstance(action, TaskDeleted):
        tasks = tuple(t for t in state.tasks if t.id != action.task_id)
        return replace(state, tasks=tasks, error=None)

    if isinstance(action, RequestFailed):
        return replace(state, error=action.message)

    raise TypeError(f"Unknown action: {action!r}")
