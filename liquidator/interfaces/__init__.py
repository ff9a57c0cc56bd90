"""Protocol interfaces for the liquidation agent's external collaborators."""
from .account_source import AccountSource
from .executor import LiquidationExecutor
from .notifier import Notifier
from .swap_quoter import SwapQuoter

__all__ = ["AccountSource", "LiquidationExecutor", "Notifier", "SwapQuoter"]
