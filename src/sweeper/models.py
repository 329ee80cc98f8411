"""Request-scoped data for one sweep: holdings, dust, routes, the output transaction."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any

from solders.hash import Hash  # type: ignore[import-untyped]
from solders.instruction import Instruction  # type: ignore[import-untyped]
from solders.message import Message  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.transaction import Transaction  # type: ignore[import-untyped]


@dataclass
class HoldingRecord:
    """One SPL token balance owned by the requesting wallet."""

    mint: str
    amount: int  # raw amount (before decimals)
    ui_amount: float  # human-readable amount (after decimals)
    decimals: int
    token_account: str = ""

    @classmethod
    def from_parsed_account(cls, data: dict[str, Any]) -> "HoldingRecord":
        """Build from a jsonParsed getTokenAccountsByOwner entry."""
        info = data["account"]["data"]["parsed"]["info"]
        token_amount = info["tokenAmount"]
        amount = int(token_amount["amount"])
        decimals = int(token_amount["decimals"])
        ui_amount = token_amount.get("uiAmount")
        if ui_amount is None:
            ui_amount = amount / (10 ** decimals)
        return cls(
            mint=info["mint"],
            amount=amount,
            ui_amount=float(ui_amount),
            decimals=decimals,
            token_account=data.get("pubkey", ""),
        )


@dataclass
class PricedHolding:
    """A holding with its USD unit price. Classified as dust when value is small."""

    mint: str
    amount: int
    ui_amount: float
    decimals: int
    price: float = 0.0

    @property
    def value(self) -> float:
        return self.price * self.ui_amount

    @classmethod
    def from_holding(cls, holding: HoldingRecord, price: float | None) -> "PricedHolding":
        return cls(
            mint=holding.mint,
            amount=holding.amount,
            ui_amount=holding.ui_amount,
            decimals=holding.decimals,
            price=float(price or 0.0),
        )


@dataclass
class Classification:
    """Classifier output. ``evaluated`` holds every holding that got a price."""

    evaluated: list[PricedHolding] = field(default_factory=list)
    dust: list[PricedHolding] = field(default_factory=list)
    # (mint, reason) per holding; repeated mints are kept
    skipped: list[tuple[str, str]] = field(default_factory=list)

    @property
    def total_dust_value(self) -> float:
        return sum(t.value for t in self.dust)


@dataclass
class SwapRoute:
    """Jupiter quote for one dust mint -> stablecoin.

    ``quote`` is the raw quote response; it is posted back to the swap
    endpoint untouched.
    """

    input_mint: str
    output_mint: str
    amount: int
    slippage_bps: int
    quote: dict[str, Any]

    @property
    def out_amount(self) -> int:
        return int(self.quote.get("outAmount", 0) or 0)


@dataclass
class LegResult:
    """Outcome of one swap leg: instructions on success, a reason when skipped."""

    mint: str
    instructions: list[Instruction] = field(default_factory=list)
    skipped_reason: str | None = None
    out_amount: int = 0

    @property
    def ok(self) -> bool:
        return self.skipped_reason is None

    @classmethod
    def succeeded(
        cls, mint: str, instructions: list[Instruction], out_amount: int = 0
    ) -> "LegResult":
        return cls(mint=mint, instructions=list(instructions), out_amount=out_amount)

    @classmethod
    def skipped(cls, mint: str, reason: str) -> "LegResult":
        return cls(mint=mint, skipped_reason=reason)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mint": self.mint,
            "status": "ok" if self.ok else "skipped",
            "instructions": len(self.instructions),
            "reason": self.skipped_reason,
        }


class UnsignedTransaction:
    """Accumulates swap instructions; fee payer and blockhash are set once at the end."""

    def __init__(self) -> None:
        self._instructions: list[Instruction] = []
        self.recent_blockhash: str | None = None
        self.last_valid_block_height: int | None = None
        self.fee_payer: Pubkey | None = None

    def __repr__(self) -> str:
        return (
            f"UnsignedTransaction(instructions={len(self._instructions)}, "
            f"fee_payer={self.fee_payer}, blockhash={self.recent_blockhash})"
        )

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        return tuple(self._instructions)

    @property
    def is_finalized(self) -> bool:
        return self.fee_payer is not None

    def add(self, *instructions: Instruction) -> None:
        if self.is_finalized:
            raise RuntimeError("transaction already finalized")
        self._instructions.extend(instructions)

    def finalize(
        self, recent_blockhash: str, last_valid_block_height: int, fee_payer: Pubkey
    ) -> None:
        if self.is_finalized:
            raise RuntimeError("fee payer and blockhash already set")
        self.recent_blockhash = recent_blockhash
        self.last_valid_block_height = last_valid_block_height
        self.fee_payer = fee_payer

    def to_message(self) -> Message:
        if not self.is_finalized:
            raise RuntimeError("transaction not finalized")
        return Message.new_with_blockhash(
            self._instructions,
            self.fee_payer,
            Hash.from_string(self.recent_blockhash),
        )

    def serialize(self) -> str:
        """Base64 wire format with empty signature slots, ready for the wallet to sign."""
        tx = Transaction.new_unsigned(self.to_message())
        return base64.b64encode(bytes(tx)).decode("ascii")


@dataclass
class SweepPlan:
    """Composer output: the transaction plus the per-leg report."""

    transaction: UnsignedTransaction
    legs: list[LegResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[LegResult]:
        return [leg for leg in self.legs if leg.ok]

    @property
    def skipped(self) -> list[LegResult]:
        return [leg for leg in self.legs if not leg.ok]
