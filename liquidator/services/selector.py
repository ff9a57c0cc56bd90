"""Opportunity selection — pick a (repay, seize) pair on an underwater account."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from ..models import Account, LiquidationOpportunity, Position

logger = logging.getLogger(__name__)

DEFAULT_CLOSE_FACTOR = Decimal("0.5")


class OpportunitySelector:
    """First-match pairing of a borrow position with a collateral position.

    Positions are walked in the order the account index returned them. The
    first borrow position that has a valid collateral counterpart wins; the
    selector does not search for the most profitable pair.
    """

    def __init__(self, close_factor: Decimal | float | str = DEFAULT_CLOSE_FACTOR) -> None:
        self.close_factor = Decimal(str(close_factor))

    def _find_seize(
        self, positions: tuple[Position, ...], repay: Position, borrow_value: Decimal
    ) -> Position | None:
        for candidate in positions:
            # Must be posted as collateral and on a different market
            if not candidate.entered_market or candidate.id == repay.id:
                continue
            if candidate.market_id.lower() == repay.market_id.lower():
                continue
            # Enough supply to cover the close-factor share of the borrow
            if candidate.supply_value_usd >= borrow_value * self.close_factor:
                return candidate
        return None

    def select(self, account: Account) -> LiquidationOpportunity | None:
        """Return the first valid repay/seize pair for ``account``, or None."""
        positions = account.positions
        if len(positions) < 2:
            return None

        for repay in positions:
            borrow_value = repay.borrow_value_usd
            if borrow_value <= 0:
                continue
            seize = self._find_seize(positions, repay, borrow_value)
            if seize is not None:
                logger.debug(
                    "Account %s: repay %s ($%.2f), seize %s ($%.2f)",
                    account.id,
                    repay.market.symbol,
                    borrow_value,
                    seize.market.symbol,
                    seize.supply_value_usd,
                )
                return LiquidationOpportunity(account=account, repay=repay, seize=seize)
        return None

    def select_first(self, accounts: Iterable[Account]) -> LiquidationOpportunity | None:
        """Return the first opportunity across a batch of accounts."""
        for account in accounts:
            opportunity = self.select(account)
            if opportunity is not None:
                return opportunity
        return None
