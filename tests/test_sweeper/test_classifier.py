"""Tests for dust classification — threshold policy, zero amounts, partial price failure."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from conftest import BONK_MINT, JUP_MINT, WIF_MINT
from src.sweeper.classifier import classify, is_dust
from src.sweeper.exceptions import UpstreamRateLimited, UpstreamUnavailable
from src.sweeper.models import HoldingRecord


def _holding(mint: str, ui_amount: float, decimals: int = 6) -> HoldingRecord:
    return HoldingRecord(
        mint=mint,
        amount=int(round(ui_amount * 10 ** decimals)),
        ui_amount=ui_amount,
        decimals=decimals,
    )


def _prices(table: dict[str, float | None]) -> AsyncMock:
    async def lookup(mint: str) -> float | None:
        return table[mint]

    return AsyncMock(side_effect=lookup)


# ── is_dust ──────────────────────────────────────────────────────────


class TestIsDust:
    @pytest.mark.parametrize(
        "value, inclusive, expected",
        [
            (5.0, True, True),
            (5.0, False, False),
            (4.99, True, True),
            (4.99, False, True),
            (5.01, True, False),
            (5.01, False, False),
            (0.0, True, False),
            (0.0, False, False),
            (0.000001, True, True),
            (-1.0, True, False),
        ],
    )
    def test_bounds(self, value, inclusive, expected):
        assert is_dust(value, 5.0, inclusive) is expected


# ── classify ─────────────────────────────────────────────────────────


class TestClassify:
    @pytest.mark.parametrize("inclusive", [True, False])
    async def test_threshold_policy(self, retry, inclusive):
        """Value exactly at the threshold is dust only under the inclusive policy."""
        holdings = [
            _holding(BONK_MINT, 2.0),  # 2 * 2.5 = 5.0 (boundary)
            _holding(WIF_MINT, 1.0),  # 1 * 3.0 = 3.0
            _holding(JUP_MINT, 10.0),  # 10 * 1.0 = 10.0
        ]
        lookup = _prices({BONK_MINT: 2.5, WIF_MINT: 3.0, JUP_MINT: 1.0})

        result = await classify(
            holdings, 5.0, price_lookup=lookup, retry=retry, inclusive=inclusive
        )

        dust_mints = [t.mint for t in result.dust]
        if inclusive:
            assert dust_mints == [BONK_MINT, WIF_MINT]
        else:
            assert dust_mints == [WIF_MINT]
        assert len(result.evaluated) == 3

    async def test_zero_amount_never_priced(self, retry):
        holdings = [_holding(BONK_MINT, 0.0), _holding(WIF_MINT, 1.0), _holding(JUP_MINT, 0.0)]
        lookup = _prices({WIF_MINT: 1.0})

        result = await classify(holdings, 5.0, price_lookup=lookup, retry=retry)

        assert lookup.await_count == 1
        lookup.assert_awaited_once_with(WIF_MINT)
        assert [t.mint for t in result.dust] == [WIF_MINT]

    async def test_lookup_count_bounded_by_nonzero_holdings(self, retry):
        holdings = [_holding(f"Mint{i}", float(i % 3)) for i in range(9)]
        lookup = AsyncMock(return_value=1.0)

        await classify(holdings, 5.0, price_lookup=lookup, retry=retry)

        nonzero = sum(1 for h in holdings if h.ui_amount > 0)
        assert lookup.await_count <= nonzero

    async def test_failed_lookup_skips_only_that_holding(self, retry):
        """3 holdings, 2nd lookup fails -> 2 evaluated, no exception."""
        holdings = [_holding(BONK_MINT, 1.0), _holding(WIF_MINT, 1.0), _holding(JUP_MINT, 1.0)]

        async def lookup(mint: str) -> float:
            if mint == WIF_MINT:
                raise UpstreamUnavailable("price: HTTP 500", 500)
            return 2.0

        result = await classify(
            holdings, 5.0, price_lookup=AsyncMock(side_effect=lookup), retry=retry
        )

        assert [t.mint for t in result.evaluated] == [BONK_MINT, JUP_MINT]
        assert [t.mint for t in result.dust] == [BONK_MINT, JUP_MINT]
        assert [mint for mint, _ in result.skipped] == [WIF_MINT]

    async def test_failures_on_same_mint_recorded_per_holding(self, retry):
        holdings = [_holding(WIF_MINT, 1.0), _holding(WIF_MINT, 2.0), _holding(BONK_MINT, 1.0)]

        async def lookup(mint: str) -> float:
            if mint == WIF_MINT:
                raise UpstreamUnavailable("price: HTTP 500", 500)
            return 1.0

        result = await classify(
            holdings, 5.0, price_lookup=AsyncMock(side_effect=lookup), retry=retry
        )

        assert result.skipped == [
            (WIF_MINT, "price: HTTP 500"),
            (WIF_MINT, "price: HTTP 500"),
        ]
        assert [t.mint for t in result.evaluated] == [BONK_MINT]

    async def test_missing_price_is_zero_and_not_dust(self, retry):
        holdings = [_holding(BONK_MINT, 1000.0)]
        lookup = _prices({BONK_MINT: None})

        result = await classify(holdings, 5.0, price_lookup=lookup, retry=retry)

        assert len(result.evaluated) == 1
        assert result.evaluated[0].price == 0.0
        assert result.evaluated[0].value == 0.0
        assert result.dust == []

    async def test_price_lookup_retried_on_rate_limit(self, retry, sleep_mock):
        holdings = [_holding(BONK_MINT, 1.0)]
        lookup = AsyncMock(side_effect=[UpstreamRateLimited("429"), 0.5])

        result = await classify(holdings, 5.0, price_lookup=lookup, retry=retry)

        assert lookup.await_count == 2
        assert sleep_mock.await_count == 1
        assert result.dust[0].value == pytest.approx(0.5)

    async def test_rate_limit_exhaustion_skips_holding(self, retry):
        holdings = [_holding(BONK_MINT, 1.0), _holding(WIF_MINT, 1.0)]

        async def lookup(mint: str) -> float:
            if mint == BONK_MINT:
                raise UpstreamRateLimited("429")
            return 1.0

        mock = AsyncMock(side_effect=lookup)
        result = await classify(holdings, 5.0, price_lookup=mock, retry=retry)

        # 5 attempts for BONK, 1 for WIF
        assert mock.await_count == 6
        assert [t.mint for t in result.dust] == [WIF_MINT]

    async def test_value_uses_ui_amount(self, retry):
        holding = HoldingRecord(mint=BONK_MINT, amount=2_500_000, ui_amount=2.5, decimals=6)
        result = await classify(
            [holding], 5.0, price_lookup=_prices({BONK_MINT: 1.2}), retry=retry
        )
        assert result.dust[0].value == pytest.approx(3.0)
        assert result.dust[0].amount == 2_500_000

    async def test_order_preserved(self, retry):
        mints = [BONK_MINT, WIF_MINT, JUP_MINT]
        holdings = [_holding(m, 1.0) for m in reversed(mints)]
        result = await classify(
            holdings, 5.0, price_lookup=AsyncMock(return_value=1.0), retry=retry
        )
        assert [t.mint for t in result.dust] == list(reversed(mints))

    async def test_empty_holdings(self, retry):
        lookup = AsyncMock()
        result = await classify([], 5.0, price_lookup=lookup, retry=retry)
        assert result.dust == [] and result.evaluated == []
        lookup.assert_not_awaited()
