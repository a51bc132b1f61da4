from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a stored Task.

    Fields:
    - id: Opaque unique identifier assigned by the store (uuid4 hex)
    - text: Task text, trimmed and non-empty
    - completed: Boolean completion flag
    - created_at: UTC creation timestamp, never modified after insert
    """

    id: str
    text: str
    completed: bool
    created_at: datetime
