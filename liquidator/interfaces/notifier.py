"""Notifier protocol — outcome reporting channel."""
from typing import Protocol


class Notifier(Protocol):
    """Abstract interface for reporting liquidation outcomes to an operator.

    ``send_alert`` is for outcomes that need attention (reverts, timeouts);
    ``send_log`` for routine records such as successful liquidations.
    """

    async def send_alert(self, message: str, subject: str = "") -> bool: ...

    async def send_log(self, message: str, silent: bool = True) -> bool: ...
