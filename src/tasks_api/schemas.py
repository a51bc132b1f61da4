from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_text(value: str) -> str:
    """
    Strip surrounding whitespace and reject empty text.
    """
    s = value.strip()
    if not s:
        raise ValueError("text must not be empty")
    return s


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "Buy milk",
                "completed": False,
            }
        }
    )

    text: str = Field(..., description="Task text; surrounding whitespace is trimmed")
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _clean_text(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for partially updating an existing Task.

    Both fields are optional, but a field the caller supplies is always applied,
    including falsy values such as ``completed: false``. Supplied fields are
    tracked in ``model_fields_set``; use ``changes()`` rather than reading the
    attributes, which default to None when absent.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "completed": True,
            }
        }
    )

    text: Optional[str] = Field(default=None, description="New task text")
    completed: Optional[bool] = Field(default=None, description="New completion status")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> str:
        # Defaults are not validated, so None here was sent explicitly.
        if v is None:
            raise ValueError("text must not be null")
        return _clean_text(v)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("completed must not be null")
        return v

    # PUBLIC_INTERFACE
    def changes(self) -> Dict[str, Any]:
        """Return only the fields the caller supplied, keyed by field name."""
        return self.model_dump(exclude_unset=True)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f1c9a0e5b7d4e2a8c6f1b0d9e8a7c65",
                "text": "Buy milk",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    text: str = Field(..., description="Task text")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp (UTC)")


# PUBLIC_INTERFACE
class MessageOut(BaseModel):
    """
    Body for error responses and delete confirmations.
    """

    message: str = Field(..., description="Human-readable message")
