"""Swap composition — one Jupiter swap leg per dust token, merged into one transaction.

Per leg:
  1. GET quote (dust mint -> stablecoin, RAW amount, fixed slippage)
  2. POST swap, Jupiter returns a base64 unsigned transaction
  3. Decode it and append its instructions to the shared transaction

A failing leg is recorded as skipped and the next one is attempted.
After all legs, one fresh blockhash is fetched and the fee payer set.
The result is never signed or sent.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable

from loguru import logger
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.message import MessageV0  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.transaction import VersionedTransaction  # type: ignore[import-untyped]

from src.parsers.jupiter.client import JupiterClient
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.sweeper.exceptions import SwapDecodeError
from src.sweeper.models import LegResult, PricedHolding, SweepPlan, UnsignedTransaction
from src.utils.retry import RetryPolicy


def decode_swap_instructions(swap_transaction_b64: str) -> list[Instruction]:
    """Decompile a serialized swap transaction back into instructions.

    Handles legacy and v0 messages. v0 messages that load accounts from
    address lookup tables can't be merged into a legacy transaction and
    raise SwapDecodeError.
    """
    try:
        raw = base64.b64decode(swap_transaction_b64, validate=True)
        tx = VersionedTransaction.from_bytes(raw)
    except (binascii.Error, ValueError) as e:
        raise SwapDecodeError(f"undecodable swap transaction: {e}") from e

    msg = tx.message
    if isinstance(msg, MessageV0) and msg.address_table_lookups:
        raise SwapDecodeError("swap transaction uses address lookup tables")

    keys: list[Pubkey] = list(msg.account_keys)
    header = msg.header
    n_signers = header.num_required_signatures
    n_writable_signers = n_signers - header.num_readonly_signed_accounts
    n_writable_unsigned_end = len(keys) - header.num_readonly_unsigned_accounts

    def _meta(index: int) -> AccountMeta:
        if index < n_signers:
            writable = index < n_writable_signers
        else:
            writable = index < n_writable_unsigned_end
        return AccountMeta(
            pubkey=keys[index], is_signer=index < n_signers, is_writable=writable
        )

    instructions: list[Instruction] = []
    for cix in msg.instructions:
        try:
            program_id = keys[cix.program_id_index]
            accounts = [_meta(i) for i in bytes(cix.accounts)]
        except IndexError as e:
            raise SwapDecodeError("instruction references unknown account") from e
        instructions.append(Instruction(program_id, bytes(cix.data), accounts))
    return instructions


class SwapComposer:
    """Builds the sweep transaction for a list of dust tokens."""

    def __init__(
        self,
        jupiter: JupiterClient,
        rpc: SolanaRpcClient,
        retry: RetryPolicy,
    ) -> None:
        self._jupiter = jupiter
        self._rpc = rpc
        self._retry = retry

    async def compose(
        self, dust_tokens: Iterable[PricedHolding], fee_payer: Pubkey
    ) -> SweepPlan:
        plan = SweepPlan(transaction=UnsignedTransaction())
        signer = str(fee_payer)

        for token in dust_tokens:
            leg = await self._compose_leg(token, signer)
            plan.legs.append(leg)
            if leg.ok:
                plan.transaction.add(*leg.instructions)

        # One blockhash for the whole transaction; failure here aborts
        blockhash, last_valid = await self._retry.run(
            self._rpc.get_latest_blockhash, label="getLatestBlockhash"
        )
        plan.transaction.finalize(blockhash, last_valid, fee_payer)

        logger.info(
            f"[SWEEP] {signer[:12]}: {len(plan.succeeded)}/{len(plan.legs)} legs, "
            f"{len(plan.transaction.instructions)} instructions, blockhash={blockhash[:16]}..."
        )
        return plan

    async def _compose_leg(self, token: PricedHolding, signer: str) -> LegResult:
        mint = token.mint
        try:
            # Jupiter amounts are raw base units, never ui_amount
            route = await self._retry.run(
                lambda: self._jupiter.get_quote(mint, token.amount),
                label=f"quote {mint[:12]}",
            )
            swap_tx = await self._retry.run(
                lambda: self._jupiter.build_swap(route, signer),
                label=f"swap {mint[:12]}",
            )
            if not swap_tx:
                logger.warning(f"[SWEEP] Empty swap transaction for {mint[:12]}, skipping")
                return LegResult.skipped(mint, "empty swap transaction")

            instructions = decode_swap_instructions(swap_tx)
        except Exception as e:
            logger.warning(f"[SWEEP] Swap leg failed for {mint[:12]}: {e}")
            return LegResult.skipped(mint, str(e) or type(e).__name__)

        logger.debug(
            f"[SWEEP] Leg {mint[:12]}: {len(instructions)} instructions, "
            f"out={route.out_amount}"
        )
        return LegResult.succeeded(mint, instructions, out_amount=route.out_amount)
