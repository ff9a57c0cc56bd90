"""Account source protocol — read-only index of protocol accounts."""
from typing import Protocol

from ..models import Account


class AccountSource(Protocol):
    """Abstract interface for fetching underwater borrower accounts."""

    async def fetch_underwater_accounts(self) -> list[Account]: ...
