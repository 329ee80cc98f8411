"""Dust classification — price each holding and keep the ones worth almost nothing.

Holdings are priced one by one, in order. A failed price lookup drops
that holding only; the rest of the wallet is still classified.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable

from loguru import logger

from src.sweeper.models import Classification, HoldingRecord, PricedHolding
from src.utils.retry import RetryPolicy

PriceLookup = Callable[[str], Awaitable[float | None]]


def is_dust(value: float, threshold: float, inclusive: bool = True) -> bool:
    """0 < value <= threshold (inclusive) or 0 < value < threshold."""
    if value <= 0:
        return False
    return value <= threshold if inclusive else value < threshold


async def classify(
    holdings: Iterable[HoldingRecord],
    threshold: float,
    *,
    price_lookup: PriceLookup,
    retry: RetryPolicy,
    inclusive: bool = True,
) -> Classification:
    result = Classification()

    for holding in holdings:
        # Empty accounts are never priced
        if holding.ui_amount <= 0:
            continue

        mint = holding.mint
        try:
            price = await retry.run(
                lambda mint=mint: price_lookup(mint), label=f"price {mint[:12]}"
            )
        except Exception as e:
            logger.warning(f"[DUST] Price lookup failed for {mint[:12]}: {e}")
            result.skipped.append((mint, str(e) or type(e).__name__))
            continue

        priced = PricedHolding.from_holding(holding, price)
        result.evaluated.append(priced)

        if is_dust(priced.value, threshold, inclusive):
            result.dust.append(priced)
            logger.debug(
                f"[DUST] {mint[:12]} amount={priced.ui_amount} "
                f"price=${priced.price:.6f} value=${priced.value:.4f}"
            )

    logger.info(
        f"[DUST] {len(result.dust)} dust / {len(result.evaluated)} priced "
        f"({len(result.skipped)} price failures), "
        f"total ${result.total_dust_value:.2f}"
    )
    return result
