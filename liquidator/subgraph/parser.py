"""Pure parsing functions for lending-subgraph account data — no I/O."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from ..models import ZERO, Account, Market, Position

logger = logging.getLogger(__name__)


def to_decimal(value: Any) -> Decimal:
    """Convert a string-encoded on-chain magnitude to Decimal.

    Missing, null and malformed values become zero.

    Examples:
        "1000.5" → Decimal("1000.5")
        None     → Decimal("0")
    """
    if value is None or value == "":
        return ZERO
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return ZERO


def _to_decimals(value: Any) -> int:
    if value is None or value == "":
        return 18
    return int(value)


def parse_market(raw: dict[str, Any], market_id: str) -> Market:
    """Parse the ``market`` object nested in a subgraph token entry."""
    return Market(
        id=raw.get("id") or market_id,
        symbol=raw.get("symbol", ""),
        underlying_symbol=raw.get("underlyingSymbol", ""),
        underlying_address=raw.get("underlyingAddress", ""),
        collateral_factor=to_decimal(raw.get("collateralFactor")),
        underlying_price_usd=to_decimal(raw.get("underlyingPriceUSD")),
        exchange_rate=to_decimal(raw.get("exchangeRate")),
        reserve_factor=to_decimal(raw.get("reserveFactor")),
        underlying_decimals=_to_decimals(raw.get("underlyingDecimals")),
    )


def parse_position(raw: dict[str, Any]) -> Position:
    """Parse one subgraph ``AccountCToken`` entry into a Position.

    The entry id is formatted as ``<market address>-<borrower address>``.
    """
    position_id = raw["id"]
    market_id = position_id.partition("-")[0]
    return Position(
        id=position_id,
        market=parse_market(raw.get("market") or {}, market_id),
        borrow_balance=to_decimal(raw.get("borrowBalanceUnderlying")),
        supply_balance=to_decimal(raw.get("supplyBalanceUnderlying")),
        entered_market=bool(raw.get("enteredMarket", False)),
    )


def parse_account(raw: dict[str, Any]) -> Account:
    """Parse one subgraph account, keeping positions in their given order."""
    return Account(
        id=raw["id"],
        health=to_decimal(raw.get("health")),
        total_borrow_value_usd=to_decimal(raw.get("totalBorrowValueInUSD")),
        total_collateral_value_usd=to_decimal(raw.get("totalCollateralValueInUSD")),
        positions=tuple(parse_position(t) for t in raw.get("tokens") or []),
    )


def parse_accounts(data: dict[str, Any]) -> list[Account]:
    """Parse the ``data`` payload of the underwater-accounts query.

    Accounts that fail to parse are skipped with a warning so a single bad
    row cannot poison the batch.
    """
    accounts: list[Account] = []
    for raw in data.get("accounts") or []:
        try:
            accounts.append(parse_account(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed account %s: %s", raw.get("id", "?"), e)
    return accounts
