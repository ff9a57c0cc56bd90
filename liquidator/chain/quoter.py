"""Swap venue quoter — Uniswap-V2 style ``getAmountsIn``."""
from __future__ import annotations

import logging
from typing import Sequence

from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError

from ..errors import RoutingError
from .abis import ROUTER_ABI

logger = logging.getLogger(__name__)


class RouterQuoter:
    """Reverse quotes (exact output) against a V2 router."""

    def __init__(self, w3: AsyncWeb3, router_address: str) -> None:
        self._w3 = w3
        self._router = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(router_address), abi=ROUTER_ABI
        )

    async def quote_input_for_exact_output(
        self, path: Sequence[str], amount_out: int
    ) -> int | None:
        """Return the input needed at ``path[0]`` for ``amount_out`` at ``path[-1]``.

        A contract revert (missing pair, insufficient liquidity) is reported
        as no route. Transport failures raise RoutingError.
        """
        checksummed = [AsyncWeb3.to_checksum_address(a) for a in path]
        try:
            amounts = await self._router.functions.getAmountsIn(
                int(amount_out), checksummed
            ).call()
        except ContractLogicError as e:
            logger.debug("No route along %s: %s", " -> ".join(path), e)
            return None
        except Exception as e:
            raise RoutingError(f"Quote request failed: {e}") from e

        if not amounts:
            return None
        return int(amounts[0])
