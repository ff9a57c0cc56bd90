"""Capital routing — size the flash-borrowed funding for a repay."""
from __future__ import annotations

import logging

from ..config import FundingConfig
from ..errors import InsufficientRouteError
from ..interfaces.swap_quoter import SwapQuoter
from ..models import FundingPlan, LiquidationOpportunity, SwapQuote, ceil_div

logger = logging.getLogger(__name__)

BPS = 10_000


class CapitalRouter:
    """Determine how much funding asset covers an exact repay amount.

    Quotes are requested in the reverse direction (exact output) along the
    shortest candidate path first: funding -> repay, then through the
    wrapped native asset. The quoted input is padded by ``slippage_bps`` and
    always rounded up.
    """

    def __init__(
        self,
        quoter: SwapQuoter,
        funding: FundingConfig,
        wrapped_native: str = "",
        slippage_bps: int = 50,
    ) -> None:
        self._quoter = quoter
        self._funding = funding
        self._wrapped_native = wrapped_native
        self._slippage_bps = slippage_bps

    @staticmethod
    def _same(a: str, b: str) -> bool:
        return bool(a) and a.lower() == b.lower()

    def candidate_paths(self, repay_asset: str) -> list[tuple[str, ...]]:
        """Swap paths from the funding asset to ``repay_asset``, shortest first."""
        funding = self._funding.address
        paths = [(funding, repay_asset)]
        hub = self._wrapped_native
        if hub and not self._same(hub, funding) and not self._same(hub, repay_asset):
            paths.append((funding, hub, repay_asset))
        return paths

    def _pad(self, amount_in: int) -> int:
        return ceil_div(amount_in * (BPS + self._slippage_bps), BPS)

    async def _best_quote(self, repay_asset: str, repay_amount: int) -> SwapQuote:
        for path in self.candidate_paths(repay_asset):
            amount_in = await self._quoter.quote_input_for_exact_output(path, repay_amount)
            if amount_in is not None and amount_in > 0:
                return SwapQuote(path=path, amount_in=amount_in)
            logger.debug("No quote along %s", " -> ".join(path))
        raise InsufficientRouteError(
            f"No swap route from {self._funding.symbol} to {repay_asset}"
        )

    async def plan(self, opportunity: LiquidationOpportunity) -> FundingPlan:
        """Return the funding plan for ``opportunity``.

        Raises:
            InsufficientRouteError: the repay asset is unknown, the repay
                amount is zero, or the swap venue has no route.
        """
        market = opportunity.repay.market
        repay_asset = market.underlying_address
        repay_amount = opportunity.repay_amount_base_units

        if not repay_asset:
            raise InsufficientRouteError(
                f"Market {market.symbol} has no underlying asset address"
            )
        if repay_amount <= 0:
            raise InsufficientRouteError(f"Nothing to repay on {market.symbol}")

        funding = self._funding
        if self._same(repay_asset, funding.address):
            plan = FundingPlan(
                funding_asset=funding.address,
                funding_symbol=funding.symbol,
                funding_decimals=funding.decimals,
                amount_in=repay_amount,
                repay_asset=repay_asset,
                repay_amount=repay_amount,
            )
        else:
            quote = await self._best_quote(repay_asset, repay_amount)
            plan = FundingPlan(
                funding_asset=funding.address,
                funding_symbol=funding.symbol,
                funding_decimals=funding.decimals,
                amount_in=self._pad(quote.amount_in),
                repay_asset=repay_asset,
                repay_amount=repay_amount,
                path=quote.path,
            )

        logger.info(
            "Funding plan: borrow %s %s to repay %s %s%s",
            plan.amount_in_units,
            funding.symbol,
            opportunity.repay.borrow_balance,
            market.underlying_symbol or market.symbol,
            f" via {len(plan.path) - 1} hop(s)" if plan.requires_swap else " (no swap)",
        )
        return plan
