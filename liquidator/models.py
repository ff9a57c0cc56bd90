"""Data models — all frozen (immutable).

Snapshot types (Market, Position, Account) are rebuilt from the account
index on every poll cycle; derived types live for one cycle only.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import ROUND_CEILING, Decimal

ZERO = Decimal(0)


# ---------------------------------------------------------------------------
# Base-unit helpers
# ---------------------------------------------------------------------------


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer division rounding towards positive infinity."""
    return -(-numerator // denominator)


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Scale a human amount to integer base units, rounding up."""
    scaled = amount.scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_CEILING))


def from_base_units(raw: int, decimals: int) -> Decimal:
    """Scale integer base units back to a human amount."""
    return Decimal(raw).scaleb(-decimals)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Market:
    """A lending pool for one underlying asset."""

    id: str
    symbol: str
    underlying_symbol: str = ""
    underlying_address: str = ""
    collateral_factor: Decimal = ZERO
    underlying_price_usd: Decimal = ZERO
    exchange_rate: Decimal = ZERO
    reserve_factor: Decimal = ZERO
    underlying_decimals: int = 18


@dataclass(frozen=True)
class Position:
    """A borrower's stake in one market."""

    id: str
    market: Market
    borrow_balance: Decimal = ZERO
    supply_balance: Decimal = ZERO
    entered_market: bool = False

    @property
    def market_id(self) -> str:
        # id is formatted as '<market address>-<borrower address>'
        head, _, _ = self.id.partition("-")
        return head or self.market.id

    @property
    def borrow_value_usd(self) -> Decimal:
        return self.borrow_balance * self.market.underlying_price_usd

    @property
    def supply_value_usd(self) -> Decimal:
        return self.supply_balance * self.market.underlying_price_usd


@dataclass(frozen=True)
class Account:
    """A borrower and its per-market positions."""

    id: str
    health: Decimal
    total_borrow_value_usd: Decimal = ZERO
    total_collateral_value_usd: Decimal = ZERO
    positions: tuple[Position, ...] = ()

    @property
    def is_liquidatable(self) -> bool:
        return ZERO < self.health < 1 and self.total_borrow_value_usd > 0


# ---------------------------------------------------------------------------
# Derived, per-cycle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LiquidationOpportunity:
    """A (repay, seize) position pair on one underwater account."""

    account: Account
    repay: Position
    seize: Position

    def __post_init__(self) -> None:
        if not self.seize.entered_market:
            raise ValueError(
                f"Seize position {self.seize.id} is not entered as collateral"
            )
        if self.repay.market_id.lower() == self.seize.market_id.lower():
            raise ValueError(
                f"Repay and seize positions share market {self.repay.market_id}"
            )

    @property
    def borrower(self) -> str:
        return self.account.id

    @property
    def repay_market_id(self) -> str:
        return self.repay.market_id

    @property
    def seize_market_id(self) -> str:
        return self.seize.market_id

    @property
    def repay_value_usd(self) -> Decimal:
        return self.repay.borrow_value_usd

    @property
    def seize_value_usd(self) -> Decimal:
        return self.seize.supply_value_usd

    @property
    def repay_amount_base_units(self) -> int:
        return to_base_units(
            self.repay.borrow_balance, self.repay.market.underlying_decimals
        )


@dataclass(frozen=True)
class SwapQuote:
    """Required input for an exact output along one swap path."""

    path: tuple[str, ...]
    amount_in: int


@dataclass(frozen=True)
class FundingPlan:
    """How much funding asset to flash-borrow, and how to swap it."""

    funding_asset: str
    funding_symbol: str
    funding_decimals: int
    amount_in: int
    repay_asset: str
    repay_amount: int
    path: tuple[str, ...] = ()

    @property
    def requires_swap(self) -> bool:
        return bool(self.path)

    @property
    def amount_in_units(self) -> Decimal:
        return from_base_units(self.amount_in, self.funding_decimals)


@dataclass(frozen=True)
class Settlement:
    """What the chain reported for a submitted liquidation."""

    tx_hash: str
    status: bool
    repaid_amount: int = 0
    profit: int = 0
    reason: str = ""
    gas_used: int = 0


class Outcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    REVERTED = "reverted"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ExecutionResult:
    """Terminal outcome of one liquidation attempt."""

    outcome: Outcome
    borrower: str
    repaid_amount: int = 0
    profit: int = 0
    reason: str = ""
    tx_hash: str = ""
    plan: FundingPlan | None = field(default=None, compare=False)

    @property
    def submitted(self) -> bool:
        return self.outcome is not Outcome.SKIPPED

    @classmethod
    def succeeded(
        cls,
        borrower: str,
        repaid_amount: int,
        profit: int,
        tx_hash: str = "",
        plan: FundingPlan | None = None,
    ) -> ExecutionResult:
        return cls(
            Outcome.SUCCEEDED,
            borrower,
            repaid_amount=repaid_amount,
            profit=profit,
            tx_hash=tx_hash,
            plan=plan,
        )

    @classmethod
    def reverted(
        cls,
        borrower: str,
        reason: str,
        tx_hash: str = "",
        plan: FundingPlan | None = None,
    ) -> ExecutionResult:
        return cls(Outcome.REVERTED, borrower, reason=reason, tx_hash=tx_hash, plan=plan)

    @classmethod
    def timed_out(
        cls,
        borrower: str,
        tx_hash: str = "",
        plan: FundingPlan | None = None,
        reason: str = "settlement not observed",
    ) -> ExecutionResult:
        return cls(
            Outcome.TIMED_OUT,
            borrower,
            reason=reason,
            tx_hash=tx_hash,
            plan=plan,
        )

    @classmethod
    def skipped(cls, borrower: str, reason: str) -> ExecutionResult:
        return cls(Outcome.SKIPPED, borrower, reason=reason)
