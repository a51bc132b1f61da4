from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from threading import RLock
from typing import List, Optional
from uuid import uuid4

from .models import TaskEntity
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """
    Raised by a storage backend when the store is unreachable or fails internally.
    The message is passed through to API clients unmodified.
    """


def new_task_id() -> str:
    """Allocate a fresh opaque task identifier."""
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    #: Short backend name reported by the health check.
    backend_name: str = ""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Create and return a new TaskEntity."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        """
        Apply the fields supplied in ``data`` to an existing TaskEntity.
        Return the updated entity, or None if not found (nothing is written).
        """

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Delete a TaskEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """Return every TaskEntity, newest created_at first."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and throwaway runs.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TaskEntity] = {}
        self._last_created_at: Optional[datetime] = None

    def _now(self) -> datetime:
        return utc_now()

    def create(self, data: TaskCreate) -> TaskEntity:
        with self._lock:
            now = self._now()
            # createdAt must not run backwards if the wall clock does.
            if self._last_created_at is not None and now < self._last_created_at:
                now = self._last_created_at
            self._last_created_at = now
            entity: TaskEntity = {
                "id": new_task_id(),
                "text": data.text,
                "completed": data.completed,
                "created_at": now,
            }
            self._items[entity["id"]] = entity
            return entity.copy()

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            updated.update(data.changes())  # type: ignore[typeddict-item]
            self._items[task_id] = updated
            return updated.copy()

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._items.pop(task_id, None) is not None

    def list(self) -> List[TaskEntity]:
        with self._lock:
            # Reversed insertion order first, so equal timestamps keep newest-first.
            items = list(reversed(list(self._items.values())))
            items_sorted = sorted(items, key=lambda t: t["created_at"], reverse=True)
            return [t.copy() for t in items_sorted]


# PUBLIC_INTERFACE
def open_repository(store_url: str) -> Repository:
    """
    Build the repository named by a store connection string.
    - memory://            InMemoryRepository
    - sqlite:///<path>     SQLiteRepository on the given file
    Unsupported schemes fall back to memory.
    """
    url = store_url.strip()
    if url.startswith("sqlite:///"):
        from .db import SQLiteRepository

        return SQLiteRepository(url[len("sqlite:///"):])
    if not url.startswith("memory://"):
        logger.warning("Unsupported store URL %r, falling back to in-memory store", url)
    return InMemoryRepository()
