from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..repositories import Repository, StoreError
from ..schemas import MessageOut, TaskCreate, TaskOut, TaskUpdate

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Task not found"
DELETED_MESSAGE = "Task deleted"

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


def _get_repo(request: Request) -> Repository:
    """
    Dependency returning the repository attached to the application.
    """
    return request.app.state.repository


def _store_failure(exc: StoreError, status_code: int) -> HTTPException:
    logger.error("Task store operation failed: %s", exc)
    return HTTPException(status_code=status_code, detail=str(exc))


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every task, newest first (sorted by createdAt descending).",
    responses={
        200: {"description": "List retrieved successfully"},
        500: {"model": MessageOut, "description": "Store unavailable"},
    },
)
@router.get("/", response_model=List[TaskOut], include_in_schema=False)
def list_tasks(repo: Repository = Depends(_get_repo)) -> List[TaskOut]:
    """
    List all tasks.
    """
    try:
        items = repo.list()
    except StoreError as exc:
        raise _store_failure(exc, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
    return [TaskOut(**it) for it in items]  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task and return it with its server-assigned id and createdAt.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"model": MessageOut, "description": "Validation error"},
    },
)
@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_task(payload: TaskCreate, repo: Repository = Depends(_get_repo)) -> TaskOut:
    """
    Create a new Task.
    """
    try:
        created = repo.create(payload)
    except StoreError as exc:
        raise _store_failure(exc, status.HTTP_400_BAD_REQUEST) from exc
    logger.info("Created task %s", created["id"])
    return TaskOut(**created)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description=(
        "Partially update a task. Only the fields present in the body are changed; "
        "an explicit `completed: false` is applied."
    ),
    responses={
        200: {"description": "Task updated"},
        400: {"model": MessageOut, "description": "Validation error"},
        404: {"model": MessageOut, "description": "Task not found"},
    },
)
def update_task(task_id: str, payload: TaskUpdate, repo: Repository = Depends(_get_repo)) -> TaskOut:
    """
    Partial update of a Task.
    """
    try:
        updated = repo.update(task_id, payload)
    except StoreError as exc:
        raise _store_failure(exc, status.HTTP_400_BAD_REQUEST) from exc
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    logger.info("Updated task %s (%s)", task_id, ", ".join(sorted(payload.changes())) or "no fields")
    return TaskOut(**updated)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=MessageOut,
    summary="Delete Task",
    description="Permanently delete a task and return a confirmation message.",
    responses={
        200: {"description": "Task deleted"},
        404: {"model": MessageOut, "description": "Task not found"},
        500: {"model": MessageOut, "description": "Store unavailable"},
    },
)
def delete_task(task_id: str, repo: Repository = Depends(_get_repo)) -> MessageOut:
    """
    Delete a Task. Returns a confirmation message, 404 if not found.
    """
    try:
        ok = repo.delete(task_id)
    except StoreError as exc:
        raise _store_failure(exc, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    logger.info("Deleted task %s", task_id)
    return MessageOut(message=DELETED_MESSAGE)
