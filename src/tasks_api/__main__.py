"""
Run the Tasks API with uvicorn.

Usage:
    python -m tasks_api
    tasks-api            (console script)

Host, port and store come from the environment, see ``tasks_api.settings``.
"""
from __future__ import annotations

import logging

import uvicorn

from .logging_setup import setup_logging
from .main import create_app
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def run_server() -> None:
    """Configure logging and serve the application until interrupted."""
    settings = get_settings()
    setup_logging(settings.log_level)

    app = create_app(settings)
    logger.info("Serving Tasks API on %s:%d (store: %s)", settings.host, settings.port, settings.store_url)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run_server()
