"""Shared test fixtures — sweep config, no-wait retry policy, swap transaction builders."""

from __future__ import annotations

import base64
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.message import Message  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.transaction import Transaction  # type: ignore[import-untyped]

from src.sweeper.config import SweepConfig
from src.utils.retry import RetryPolicy

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
WIF_MINT = "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"
JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"


@pytest.fixture
def owner() -> Pubkey:
    return Keypair().pubkey()


@pytest.fixture
def sweep_config() -> SweepConfig:
    return SweepConfig(
        stablecoin_mint=USDC_MINT,
        quote_endpoint="https://api.jup.ag/swap/v1/quote",
        swap_endpoint="https://api.jup.ag/swap/v1/swap",
        price_endpoint="https://api.jup.ag/price/v2",
        dust_threshold=5.0,
        threshold_inclusive=True,
        slippage_bps=50,
    )


@pytest.fixture
def sleep_mock() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def retry(sleep_mock: AsyncMock) -> RetryPolicy:
    """Default budget (5 attempts, 1s base) with sleeps recorded, never awaited for real."""
    return RetryPolicy(max_attempts=5, base_delay=1.0, sleep=sleep_mock)


def token_account_entry(
    mint: str, amount: int, decimals: int, *, ui_amount: float | None = None
) -> dict:
    """Build one jsonParsed getTokenAccountsByOwner entry."""
    if ui_amount is None:
        ui_amount = amount / (10 ** decimals)
    return {
        "pubkey": str(Pubkey.new_unique()),
        "account": {
            "data": {
                "parsed": {
                    "info": {
                        "mint": mint,
                        "tokenAmount": {
                            "amount": str(amount),
                            "decimals": decimals,
                            "uiAmount": ui_amount,
                        },
                    },
                    "type": "account",
                },
                "program": "spl-token",
            },
        },
    }


def make_swap_instructions(signer: Pubkey, count: int = 2) -> list[Instruction]:
    program = Pubkey.new_unique()
    pool = Pubkey.new_unique()
    return [
        Instruction(
            program,
            bytes([i, 0xAA]),
            [
                AccountMeta(pubkey=signer, is_signer=True, is_writable=True),
                AccountMeta(pubkey=pool, is_signer=False, is_writable=True),
            ],
        )
        for i in range(count)
    ]


def encode_transaction(instructions: list[Instruction], payer: Pubkey) -> str:
    msg = Message.new_with_blockhash(instructions, payer, Hash.new_unique())
    tx = Transaction.new_unsigned(msg)
    return base64.b64encode(bytes(tx)).decode("ascii")


@pytest.fixture
def swap_tx_factory() -> Callable[..., tuple[str, list[Instruction]]]:
    """Return a builder: (signer, count) -> (base64 tx, its instructions)."""

    def _build(signer: Pubkey, count: int = 2) -> tuple[str, list[Instruction]]:
        ixs = make_swap_instructions(signer, count)
        return encode_transaction(ixs, signer), ixs

    return _build
