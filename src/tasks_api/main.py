from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .repositories import Repository, open_repository
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, list, update and delete tasks.",
    },
]


def _validation_message(exc: RequestValidationError) -> str:
    """
    Join validator messages into one line, e.g. "text: Field required".
    """
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        msg = err.get("msg", "Invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Request validation failed"


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return request validation errors as a client error with a readable message.

    Response format:
        {
            "message": "text: Value error, text must not be empty",
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=400,
        content={
            "message": _validation_message(exc),
            "error": "ValidationError",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render every HTTP error as ``{"message": ...}``.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        repository: Storage backend; opened from ``settings.store_url`` when omitted.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Tasks API",
        description="Backend API service for a minimal task list.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    repo = repository if repository is not None else open_repository(settings.store_url)
    app.state.repository = repo

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the store backend in use.
        """
        return {"message": "Healthy", "backend": repo.backend_name}

    app.include_router(tasks_router.router)
    logger.debug("Application created with %s store", repo.backend_name)
    return app
