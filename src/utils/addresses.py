"""Account address validation."""

from __future__ import annotations

from typing import Any

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.sweeper.exceptions import InvalidAccount


def parse_account(value: Any) -> Pubkey:
    """Parse a base58 Solana address, raising InvalidAccount when malformed.

    Never touches the network, so callers can reject bad input
    before any RPC is issued.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidAccount("account must be a non-empty base58 string")
    try:
        return Pubkey.from_string(value.strip())
    except ValueError as e:
        raise InvalidAccount(f"not a valid Solana address: {value!r}") from e
