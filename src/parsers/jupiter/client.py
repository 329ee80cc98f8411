"""Jupiter API client — pricing (Price API), quoting and swap building (Swap API).

Every method makes exactly one HTTP request. Retries belong to the
caller (RetryPolicy), which only retries UpstreamRateLimited.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from src.parsers.jupiter.models import JupiterPrice, JupiterSwapResponse
from src.sweeper.config import SweepConfig
from src.sweeper.exceptions import UpstreamRateLimited, UpstreamUnavailable
from src.sweeper.models import SwapRoute


class JupiterClient:
    """Async HTTP client for the three Jupiter endpoints the sweeper composes."""

    def __init__(
        self,
        config: SweepConfig,
        *,
        api_key: str = "",
        timeout: float = 15.0,
    ) -> None:
        self._config = config
        headers: dict[str, str] = {"Accept": "application/json"}
        if config.forward_action_headers:
            headers.update(config.action_headers)
        if api_key:
            headers["x-api-key"] = api_key
        self._http = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._http.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        what: str,
    ) -> dict[str, Any]:
        try:
            resp = await self._http.request(method, url, params=params, json=json_data)
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            raise UpstreamUnavailable(f"{what}: {type(e).__name__}") from e

        if resp.status_code == 429:
            logger.debug(f"[JUPITER] {what} rate limited")
            raise UpstreamRateLimited(f"{what}: rate limited", 429)

        if resp.status_code != 200:
            try:
                data = resp.json()
                error_msg = data.get("error", data.get("message", f"HTTP {resp.status_code}"))
            except ValueError:
                error_msg = f"HTTP {resp.status_code}"
            raise UpstreamUnavailable(f"{what}: {error_msg}", resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamUnavailable(f"{what}: invalid JSON response") from e

    async def get_price(self, mint: str) -> float | None:
        """USD price of one whole token, or None when Jupiter has no quote for it."""
        data = await self._send(
            "GET", self._config.price_endpoint, params={"ids": mint}, what="price"
        )
        price = _parse_price(data, mint)
        if price is None or price.price is None:
            logger.debug(f"[JUPITER] No price for {mint[:12]}")
            return None
        return price.price

    async def get_quote(self, input_mint: str, amount: int) -> SwapRoute:
        """GET quote for ``amount`` raw units of ``input_mint`` -> stablecoin."""
        output_mint = self._config.stablecoin_mint
        slippage = self._config.slippage_bps
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(int(amount)),
            "slippageBps": str(slippage),
        }
        if self._config.as_legacy_transaction:
            # Route must fit in a legacy (no lookup table) transaction
            params["asLegacyTransaction"] = "true"

        quote = await self._send(
            "GET", self._config.quote_endpoint, params=params, what="quote"
        )
        return SwapRoute(
            input_mint=input_mint,
            output_mint=output_mint,
            amount=int(amount),
            slippage_bps=slippage,
            quote=quote,
        )

    async def build_swap(self, route: SwapRoute, user_public_key: str) -> str | None:
        """POST the quote back and return the base64 swap transaction (None if empty)."""
        payload: dict[str, Any] = {
            "quoteResponse": route.quote,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
        }
        if self._config.as_legacy_transaction:
            payload["asLegacyTransaction"] = True

        data = await self._send(
            "POST", self._config.swap_endpoint, json_data=payload, what="swap"
        )
        swap = JupiterSwapResponse.model_validate(data)
        return swap.swap_transaction or None


def _parse_price(data: dict, mint: str) -> JupiterPrice | None:
    """Parse Jupiter Price API response for a single mint."""
    token_data = (data.get("data") or {}).get(mint)
    if not token_data:
        return None
    return JupiterPrice(
        id=mint,
        type=token_data.get("type", ""),
        price=token_data.get("price"),
    )
