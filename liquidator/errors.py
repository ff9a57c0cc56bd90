"""Exception hierarchy for the liquidation agent."""
from __future__ import annotations


class LiquidatorError(Exception):
    """Base class for all agent errors."""


class ConfigError(LiquidatorError, ValueError):
    """Missing or invalid startup configuration. Fatal."""


class DataSourceError(LiquidatorError):
    """The account index could not be queried. Transient; skip the tick."""


class RoutingError(LiquidatorError):
    """Capital for a repay could not be sized."""


class InsufficientRouteError(RoutingError):
    """The swap venue reported no usable path for the repay asset."""


class SubmissionError(LiquidatorError):
    """The liquidation transaction was not handed off to the network."""


class SettlementTimeoutError(LiquidatorError):
    """A submitted transaction did not settle within the wait budget."""

    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(f"Transaction {tx_hash} not settled after {timeout:.0f}s")
        self.tx_hash = tx_hash
        self.timeout = timeout
