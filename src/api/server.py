"""Action server — runs uvicorn inside the current asyncio event loop."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from loguru import logger

from config.settings import settings


async def run_action_server(app: FastAPI | None = None) -> None:
    """Serve the FastAPI action app until uvicorn receives a shutdown signal.

    Uses ``uvicorn.Server.serve()`` which is fully async; uvicorn installs
    its own SIGINT/SIGTERM handlers and runs the app lifespan on exit.
    """
    if app is None:
        from src.api.app import create_app

        app = create_app()

    config = uvicorn.Config(
        app=app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        loop="none",  # use the existing event loop
    )
    server = uvicorn.Server(config)
    logger.info(f"Dust sweeper action listening on http://{settings.host}:{settings.port}/action")
    await server.serve()
