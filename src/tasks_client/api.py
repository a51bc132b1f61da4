"""Async HTTP client for the Tasks API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .state import Task

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api/tasks"


class ApiError(Exception):
    """
    A request to the Tasks API failed.

    ``status_code`` is None when no response arrived (connection refused, DNS, ...).
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


UNEXPECTED_RESPONSE = "Unexpected response from server"


def _parse_task(data: Any) -> Task:
    try:
        return Task.from_json(data)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Malformed task in response: %r", data)
        raise ApiError(UNEXPECTED_RESPONSE) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


@dataclass
class TasksClient:
    """Client for the /api/tasks collection.

    One request per call; no retries, no de-duplication and no timeout. Pass
    ``transport`` to route requests somewhere other than the network (tests,
    in-process ASGI apps).

        GET    {base_url}
        POST   {base_url}
        PUT    {base_url}/{id}
        DELETE {base_url}/{id}
    """

    base_url: str = DEFAULT_API_URL
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _item_url(self, task_id: str) -> str:
        return f"{self.base_url.rstrip('/')}/{task_id}"

    async def _request(self, method: str, url: str, json: Optional[Dict[str, Any]] = None) -> Any:
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=None) as client:
                response = await client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s -> %d: %s", method, url, response.status_code, message)
            raise ApiError(message, response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON in response", response.status_code) from exc

    async def list_tasks(self) -> List[Task]:
        """Fetch every task, in server order (newest first)."""
        data = await self._request("GET", self.base_url)
        if not isinstance(data, list):
            logger.warning("Expected a task list, got: %r", data)
            raise ApiError(UNEXPECTED_RESPONSE)
        return [_parse_task(item) for item in data]

    async def create_task(self, text: str, completed: bool = False) -> Task:
        """Create a task and return it with its server-assigned id."""
        data = await self._request("POST", self.base_url, json={"text": text, "completed": completed})
        return _parse_task(data)

    async def update_task(
        self,
        task_id: str,
        *,
        text: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Task:
        """Send only the fields given; ``completed=False`` is sent as false."""
        body: Dict[str, Any] = {}
        if text is not None:
            body["text"] = text
        if completed is not None:
            body["completed"] = completed
        data = await self._request("PUT", self._item_url(task_id), json=body)
        return _parse_task(data)

    async def delete_task(self, task_id: str) -> str:
        """Delete a task and return the server's confirmation message."""
        data = await self._request("DELETE", self._item_url(task_id))
        return str(data.get("message", "")) if isinstance(data, dict) else ""
