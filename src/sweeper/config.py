"""Immutable sweep configuration, built once from Settings and passed into the pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from config.settings import Settings

ACTIONS_CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PUT,OPTIONS",
    "Access-Control-Allow-Headers": (
        "Content-Type, Authorization, Content-Encoding, Accept-Encoding, "
        "X-Accept-Action-Version, X-Accept-Blockchain-Ids"
    ),
    "Access-Control-Expose-Headers": "X-Action-Version, X-Blockchain-Ids",
}


@dataclass(frozen=True)
class SweepConfig:
    stablecoin_mint: str
    quote_endpoint: str
    swap_endpoint: str
    price_endpoint: str
    dust_threshold: float = 5.0
    threshold_inclusive: bool = True
    slippage_bps: int = 50
    token_program_id: str = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
    as_legacy_transaction: bool = True
    enable_view_action: bool = True
    forward_action_headers: bool = False
    action_version: str = "2.1.3"
    blockchain_ids: str = "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"

    @classmethod
    def from_settings(cls, s: Settings) -> "SweepConfig":
        return cls(
            stablecoin_mint=s.stablecoin_mint,
            quote_endpoint=s.jupiter_quote_url,
            swap_endpoint=s.jupiter_swap_url,
            price_endpoint=s.jupiter_price_url,
            dust_threshold=s.dust_threshold_usd,
            threshold_inclusive=s.dust_threshold_inclusive,
            slippage_bps=s.slippage_bps,
            token_program_id=s.token_program_id,
            as_legacy_transaction=s.jupiter_as_legacy_transaction,
            enable_view_action=s.enable_view_action,
            forward_action_headers=s.forward_action_headers,
            action_version=s.action_version,
            blockchain_ids=s.action_blockchain_ids,
        )

    @property
    def action_headers(self) -> dict[str, str]:
        """Fixed header set sent on every action response."""
        return {
            "X-Action-Version": self.action_version,
            "X-Blockchain-Ids": self.blockchain_ids,
            **ACTIONS_CORS_HEADERS,
        }

    @property
    def threshold_label(self) -> str:
        op = "≤" if self.threshold_inclusive else "<"
        return f"{op} ${self.dust_threshold:g}"
