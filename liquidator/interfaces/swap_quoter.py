"""Swap quoter protocol — reverse quotes from the swap venue."""
from typing import Protocol, Sequence


class SwapQuoter(Protocol):
    """Abstract interface for exact-output swap quotes.

    Returns the input amount (base units of ``path[0]``) needed to receive
    ``amount_out`` base units of ``path[-1]``, or None when the venue has no
    route along the path.
    """

    async def quote_input_for_exact_output(
        self, path: Sequence[str], amount_out: int
    ) -> int | None: ...
