"""On-chain liquidation executor for the flash-loan liquidator contract."""
from __future__ import annotations

import logging
from typing import Any

from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted
from web3.logs import DISCARD

from ..config import ChainConfig, LiquidatorContractConfig
from ..errors import SettlementTimeoutError, SubmissionError
from ..models import Settlement
from .abis import LIQUIDATOR_ABI

logger = logging.getLogger(__name__)

PRIORITY_FEE_GWEI = 1


class ContractExecutor:
    """Simulate, sign, broadcast and settle ``liquidate`` calls.

    The contract flash-borrows the funding asset, swaps it into the repay
    asset, repays, redeems the seized collateral and emits
    ``LiquidationEvent`` with the repaid amount and realised profit.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        chain: ChainConfig,
        config: LiquidatorContractConfig,
    ) -> None:
        self._w3 = w3
        self._chain_id = chain.chain_id
        self._gas_multiplier = config.gas_multiplier
        self._fallback_gas_limit = config.fallback_gas_limit
        self._account = w3.eth.account.from_key(config.private_key)
        self._contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(config.contract_address),
            abi=LIQUIDATOR_ABI,
        )
        # tx hash -> call arguments, kept until settled for revert replay
        self._pending: dict[str, tuple[str, str, str]] = {}

    @property
    def address(self) -> str:
        return self._account.address

    def _liquidate_call(self, borrower: str, repay_market: str, seize_market: str) -> Any:
        return self._contract.functions.liquidate(
            AsyncWeb3.to_checksum_address(borrower),
            AsyncWeb3.to_checksum_address(repay_market),
            AsyncWeb3.to_checksum_address(seize_market),
        )

    async def submit(self, borrower: str, repay_market: str, seize_market: str) -> str:
        """Broadcast ``liquidate`` and return the transaction hash.

        Raises:
            SubmissionError: the call reverts in simulation, or the transaction
                could not be built, signed or broadcast.
        """
        try:
            tx_func = self._liquidate_call(borrower, repay_market, seize_market)
        except (TypeError, ValueError) as e:
            raise SubmissionError(f"Invalid liquidation arguments: {e}") from e

        try:
            await tx_func.call({"from": self._account.address})
        except ContractLogicError as e:
            raise SubmissionError(f"Simulation reverted: {e}") from e
        except Exception as e:
            raise SubmissionError(f"Simulation failed: {e}") from e

        try:
            try:
                gas_est = await tx_func.estimate_gas({"from": self._account.address})
                gas_limit = int(gas_est * self._gas_multiplier)
            except Exception as gas_err:
                logger.warning("Gas estimation failed, using fallback: %s", gas_err)
                gas_limit = self._fallback_gas_limit

            nonce = await self._w3.eth.get_transaction_count(
                self._account.address, "pending"
            )
            block = await self._w3.eth.get_block("latest")
            priority = self._w3.to_wei(PRIORITY_FEE_GWEI, "gwei")
            max_fee = block["baseFeePerGas"] * 2 + priority

            tx = await tx_func.build_transaction(
                {
                    "from": self._account.address,
                    "nonce": nonce,
                    "maxFeePerGas": max_fee,
                    "maxPriorityFeePerGas": priority,
                    "gas": gas_limit,
                    "chainId": self._chain_id,
                }
            )
            signed = self._account.sign_transaction(tx)
            raw_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            raise SubmissionError(f"Transaction build/send failed: {e}") from e

        tx_hash = self._w3.to_hex(raw_hash)
        self._pending[tx_hash] = (borrower, repay_market, seize_market)
        logger.info("Liquidation sent: %s (gas limit %d)", tx_hash, gas_limit)
        return tx_hash

    async def await_settlement(self, tx_hash: str, timeout: float) -> Settlement:
        """Wait for the receipt and decode the liquidation outcome.

        Raises:
            SettlementTimeoutError: no receipt within ``timeout`` seconds.
        """
        call_args = self._pending.pop(tx_hash, None)
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout
            )
        except TimeExhausted as e:
            raise SettlementTimeoutError(tx_hash, timeout) from e

        gas_used = int(receipt["gasUsed"])

        if receipt["status"] != 1:
            reason = await self._revert_reason(call_args, receipt["blockNumber"])
            return Settlement(tx_hash, status=False, reason=reason, gas_used=gas_used)

        events = self._contract.events.LiquidationEvent().process_receipt(
            receipt, errors=DISCARD
        )
        if not events:
            return Settlement(
                tx_hash,
                status=False,
                reason="no LiquidationEvent in receipt",
                gas_used=gas_used,
            )

        args = events[0]["args"]
        return Settlement(
            tx_hash,
            status=True,
            repaid_amount=int(args["repayAmount"]),
            profit=int(args["profitedAvax"]),
            gas_used=gas_used,
        )

    async def _revert_reason(
        self, call_args: tuple[str, str, str] | None, block_number: int
    ) -> str:
        """Replay the call at the inclusion block to recover the revert reason."""
        if call_args is None:
            return "transaction reverted"
        try:
            await self._liquidate_call(*call_args).call(
                {"from": self._account.address}, block_identifier=block_number
            )
        except ContractLogicError as e:
            return str(e) or "transaction reverted"
        except Exception as e:
            logger.debug("Revert replay failed: %s", e)
        return "transaction reverted"
