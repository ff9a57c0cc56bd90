"""Liquidation executor protocol — the on-chain liquidate call."""
from typing import Protocol

from ..models import Settlement


class LiquidationExecutor(Protocol):
    """Abstract interface for submitting and settling liquidations."""

    async def submit(
        self, borrower: str, repay_market: str, seize_market: str
    ) -> str: ...

    async def await_settlement(self, tx_hash: str, timeout: float) -> Settlement: ...
