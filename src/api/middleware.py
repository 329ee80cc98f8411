"""Action protocol headers — the same fixed set on every response."""

from __future__ import annotations

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class ActionHeadersMiddleware(BaseHTTPMiddleware):
    """Inject X-Action-Version, X-Blockchain-Ids and the CORS headers wallets expect."""

    def __init__(self, app: ASGIApp, headers: dict[str, str]) -> None:
        super().__init__(app)
        self._headers = dict(headers)

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        response: Response = await call_next(request)
        for name, value in self._headers.items():
            response.headers[name] = value
        return response
