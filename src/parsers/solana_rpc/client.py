"""Solana JSON-RPC client — token holdings and recent blockhash.

No retries here: callers wrap each call with RetryPolicy so retry scope
stays per call. 429s surface as UpstreamRateLimited, everything else
as UpstreamUnavailable.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from src.sweeper.exceptions import UpstreamRateLimited, UpstreamUnavailable

# Some providers report throttling inside the JSON-RPC envelope
RPC_RATE_LIMIT_CODES = {429, -32429}


class SolanaRpcClient:
    """Async JSON-RPC client for the read-only calls the sweeper needs."""

    def __init__(
        self, rpc_url: str, *, commitment: str = "confirmed", timeout: float = 15.0
    ) -> None:
        if not rpc_url:
            raise ValueError("RPC URL is empty")
        self._rpc_url = rpc_url
        self._commitment = commitment
        self._http = httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    def __repr__(self) -> str:
        return f"SolanaRpcClient(url={self._rpc_url.split('?')[0]})"

    async def close(self) -> None:
        await self._http.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        try:
            resp = await self._http.post(self._rpc_url, json=payload)
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            raise UpstreamUnavailable(f"{method}: {type(e).__name__}") from e

        if resp.status_code == 429:
            raise UpstreamRateLimited(f"{method}: rate limited", 429)
        if resp.status_code != 200:
            logger.warning(f"[RPC] {method} HTTP {resp.status_code}")
            raise UpstreamUnavailable(f"{method}: HTTP {resp.status_code}", resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"{method}: invalid JSON response") from e

        if "error" in data:
            error = data["error"] or {}
            code = error.get("code")
            msg = error.get("message", str(error))
            if code in RPC_RATE_LIMIT_CODES:
                raise UpstreamRateLimited(f"{method}: {msg}", 429)
            logger.warning(f"[RPC] {method} error {code}: {msg}")
            raise UpstreamUnavailable(f"{method}: RPC error {code}: {msg}")

        return data.get("result")

    async def get_token_accounts_by_owner(
        self, owner: str, program_id: str
    ) -> list[dict[str, Any]]:
        """All token accounts of ``owner`` under ``program_id``, jsonParsed."""
        result = await self._call(
            "getTokenAccountsByOwner",
            [
                owner,
                {"programId": program_id},
                {"encoding": "jsonParsed", "commitment": self._commitment},
            ],
        )
        if not result:
            return []
        return result.get("value", []) or []

    async def get_latest_blockhash(self) -> tuple[str, int]:
        """Return (blockhash, last_valid_block_height)."""
        result = await self._call(
            "getLatestBlockhash", [{"commitment": self._commitment}]
        )
        try:
            value = result["value"]
            return value["blockhash"], int(value["lastValidBlockHeight"])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailable("getLatestBlockhash: malformed result") from e
