"""FastAPI application factory for the dust sweeper action."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from config.settings import Settings, settings as default_settings
from src.api.middleware import ActionHeadersMiddleware
from src.parsers.jupiter.client import JupiterClient
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.sweeper.config import SweepConfig
from src.sweeper.pipeline import DustSweeper
from src.utils.retry import RetryPolicy

# Rate limiter (shared instance)
limiter = Limiter(key_func=get_remote_address)

# POST /action limit, replaced by create_app() from its Settings
_action_rate_limit = default_settings.action_rate_limit


def action_rate_limit() -> str:
    """Current inbound limit for POST /action (slowapi syntax)."""
    return _action_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the action error shape instead of slowapi's flat string."""
    logger.warning(
        f"[ACTION] Rate limit exceeded for {get_remote_address(request)}: {exc.detail}"
    )
    return JSONResponse(
        {"error": {"message": f"Rate limit exceeded: {exc.detail}"}},
        status_code=429,
    )


def build_sweeper(s: Settings) -> DustSweeper:
    """Wire clients and retry policy from settings."""
    config = SweepConfig.from_settings(s)
    rpc = SolanaRpcClient(
        s.solana_rpc_url, commitment=s.rpc_commitment, timeout=s.http_timeout_sec
    )
    jupiter = JupiterClient(config, api_key=s.jupiter_api_key, timeout=s.http_timeout_sec)
    retry = RetryPolicy(
        max_attempts=s.retry_max_attempts, base_delay=s.retry_base_delay_sec
    )
    return DustSweeper(config, rpc, jupiter, retry)


def create_app(
    settings: Settings | None = None, sweeper: DustSweeper | None = None
) -> FastAPI:
    """Build and configure the FastAPI application."""
    global _action_rate_limit
    s = settings or default_settings
    sweeper = sweeper or build_sweeper(s)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.sweeper.close()
        logger.info("[ACTION] HTTP clients closed")

    app = FastAPI(
        title="Dust Sweeper Action",
        version="0.1.0",
        docs_url="/docs" if s.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if s.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = s
    app.state.sweeper = sweeper

    # Rate limiting
    _action_rate_limit = s.action_rate_limit
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Action protocol + CORS headers on every response
    app.add_middleware(ActionHeadersMiddleware, headers=sweeper.config.action_headers)

    # Import and include routers
    from src.api.routers.action import router as action_router
    from src.api.routers.health import router as health_router

    app.include_router(action_router)
    app.include_router(health_router)

    return app
