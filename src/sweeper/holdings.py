"""Holdings enumeration — every SPL token account owned by a wallet."""

from __future__ import annotations

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.solana_rpc.client import SolanaRpcClient
from src.sweeper.models import HoldingRecord
from src.utils.addresses import parse_account
from src.utils.retry import RetryPolicy


async def enumerate_holdings(
    rpc: SolanaRpcClient,
    owner: str | Pubkey,
    token_program_id: str,
    retry: RetryPolicy,
) -> list[HoldingRecord]:
    """Return the owner's token holdings under ``token_program_id``.

    The address is validated before any RPC call (InvalidAccount).
    Upstream failure after retries propagates and aborts the sweep.
    No ordering or de-duplication is applied.
    """
    pubkey = owner if isinstance(owner, Pubkey) else parse_account(owner)
    owner_str = str(pubkey)

    accounts = await retry.run(
        lambda: rpc.get_token_accounts_by_owner(owner_str, token_program_id),
        label="getTokenAccountsByOwner",
    )

    holdings: list[HoldingRecord] = []
    for entry in accounts:
        try:
            holdings.append(HoldingRecord.from_parsed_account(entry))
        except (KeyError, TypeError, ValueError) as e:
            ref = entry.get("pubkey") if isinstance(entry, dict) else entry
            logger.debug(f"[HOLDINGS] Skipping malformed token account {ref!r}: {e}")

    logger.info(f"[HOLDINGS] {owner_str[:12]}: {len(holdings)} token accounts")
    return holdings
