"""DustSweeper — holdings -> dust classification -> swap composition."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.jupiter.client import JupiterClient
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.sweeper.classifier import classify
from src.sweeper.composer import SwapComposer
from src.sweeper.config import SweepConfig
from src.sweeper.holdings import enumerate_holdings
from src.sweeper.models import Classification, SweepPlan
from src.utils.addresses import parse_account
from src.utils.retry import RetryPolicy


@dataclass
class ScanResult:
    account: Pubkey
    classification: Classification


@dataclass
class SweepResult:
    account: Pubkey
    classification: Classification
    plan: SweepPlan

    @property
    def message(self) -> str:
        return (
            f"Created swap transaction for {len(self.plan.succeeded)} of "
            f"{len(self.classification.dust)} dust tokens"
        )


class DustSweeper:
    """One instance per app; all state it touches during a call is request-local."""

    def __init__(
        self,
        config: SweepConfig,
        rpc: SolanaRpcClient,
        jupiter: JupiterClient,
        retry: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self._rpc = rpc
        self._jupiter = jupiter
        self._retry = retry or RetryPolicy()
        self._composer = SwapComposer(jupiter, rpc, self._retry)

    async def close(self) -> None:
        await self._jupiter.close()
        await self._rpc.close()

    async def scan(self, account: str) -> ScanResult:
        """Enumerate and classify. Raises InvalidAccount before any network call."""
        owner = parse_account(account)
        holdings = await enumerate_holdings(
            self._rpc, owner, self.config.token_program_id, self._retry
        )
        classification = await classify(
            holdings,
            self.config.dust_threshold,
            price_lookup=self._jupiter.get_price,
            retry=self._retry,
            inclusive=self.config.threshold_inclusive,
        )
        return ScanResult(account=owner, classification=classification)

    async def sweep(self, account: str) -> SweepResult:
        scan = await self.scan(account)
        plan = await self._composer.compose(scan.classification.dust, scan.account)
        result = SweepResult(
            account=scan.account, classification=scan.classification, plan=plan
        )
        logger.info(f"[SWEEP] {str(scan.account)[:12]}: {result.message}")
        return result

    def view_message(self, scan: ScanResult) -> str:
        return (
            f"Found {len(scan.classification.dust)} dust tokens worth "
            f"{self.config.threshold_label}"
        )
