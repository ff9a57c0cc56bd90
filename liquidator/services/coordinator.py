"""Execution coordinator — drives one liquidation attempt to a terminal state."""
from __future__ import annotations

import asyncio
import enum
import logging

from ..errors import RoutingError, SettlementTimeoutError, SubmissionError
from ..interfaces.executor import LiquidationExecutor
from ..models import ExecutionResult, FundingPlan, LiquidationOpportunity, Settlement
from .router import CapitalRouter

logger = logging.getLogger(__name__)


class CoordinatorState(str, enum.Enum):
    IDLE = "idle"
    PLANNING = "planning"
    SUBMITTING = "submitting"
    AWAITING_SETTLEMENT = "awaiting_settlement"
    SUCCEEDED = "succeeded"
    REVERTED = "reverted"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"


TERMINAL_STATES = frozenset(
    {
        CoordinatorState.SUCCEEDED,
        CoordinatorState.REVERTED,
        CoordinatorState.TIMED_OUT,
        CoordinatorState.SKIPPED,
    }
)


class ExecutionCoordinator:
    """State machine for a single liquidation attempt.

    Idle -> Planning -> Submitting -> AwaitingSettlement -> terminal -> Idle.
    There is no retry loop here; a failed opportunity is only reconsidered
    when the next poll cycle recomputes it from fresh state.
    """

    def __init__(
        self,
        router: CapitalRouter,
        executor: LiquidationExecutor,
        settlement_timeout: float = 60.0,
    ) -> None:
        self._router = router
        self._executor = executor
        self._settlement_timeout = settlement_timeout
        self._in_flight: set[str] = set()
        # (borrower, tx hash) while a sent transaction awaits its receipt
        self._awaiting: tuple[str, str] | None = None
        self.state = CoordinatorState.IDLE
        self.history: list[CoordinatorState] = []

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    def take_abandoned(self) -> tuple[str, str] | None:
        """Return and clear the sent transaction of a cancelled attempt.

        Returns ``(borrower, tx_hash)`` when the last attempt was cancelled
        after broadcast but before settlement was observed, else None.
        """
        abandoned, self._awaiting = self._awaiting, None
        return abandoned

    def _transition(self, state: CoordinatorState) -> None:
        logger.debug("Coordinator: %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _finish(self, state: CoordinatorState, result: ExecutionResult) -> ExecutionResult:
        self._awaiting = None
        self._transition(state)
        self._transition(CoordinatorState.IDLE)
        return result

    async def execute(self, opportunity: LiquidationOpportunity) -> ExecutionResult:
        """Plan, submit and settle one liquidation; always ends back in Idle."""
        borrower = opportunity.borrower.lower()

        if borrower in self._in_flight:
            logger.warning("Submission already in flight for %s, skipping", borrower)
            return ExecutionResult.skipped(opportunity.borrower, "submission already in flight")

        self._in_flight.add(borrower)
        self.history = []
        self._awaiting = None
        try:
            return await self._run(opportunity)
        finally:
            self._in_flight.discard(borrower)
            if self.state is not CoordinatorState.IDLE:
                # Cancelled mid-attempt (tick timeout); a sent tx is left for take_abandoned().
                self._transition(CoordinatorState.IDLE)

    async def _run(self, opportunity: LiquidationOpportunity) -> ExecutionResult:
        borrower = opportunity.borrower
        self._transition(CoordinatorState.PLANNING)

        try:
            plan = await self._router.plan(opportunity)
        except RoutingError as e:
            logger.info("Skipping %s: %s", borrower, e)
            return self._finish(
                CoordinatorState.SKIPPED, ExecutionResult.skipped(borrower, str(e))
            )

        self._transition(CoordinatorState.SUBMITTING)
        logger.info(
            "Performing liquidation on borrower %s: repay %s, seize %s",
            borrower,
            opportunity.repay.market.symbol,
            opportunity.seize.market.symbol,
        )
        try:
            tx_hash = await self._executor.submit(
                borrower, opportunity.repay_market_id, opportunity.seize_market_id
            )
        except SubmissionError as e:
            logger.warning("Submission for %s not handed off: %s", borrower, e)
            return self._finish(
                CoordinatorState.SKIPPED, ExecutionResult.skipped(borrower, str(e))
            )

        self._transition(CoordinatorState.AWAITING_SETTLEMENT)
        self._awaiting = (borrower, tx_hash)
        try:
            settlement = await asyncio.wait_for(
                self._executor.await_settlement(tx_hash, self._settlement_timeout),
                timeout=self._settlement_timeout,
            )
        except (SettlementTimeoutError, asyncio.TimeoutError):
            logger.error(
                "Settlement of %s for %s not observed within %.0fs; "
                "transaction may still land",
                tx_hash,
                borrower,
                self._settlement_timeout,
            )
            return self._finish(
                CoordinatorState.TIMED_OUT,
                ExecutionResult.timed_out(borrower, tx_hash=tx_hash, plan=plan),
            )
        except Exception as e:
            logger.error(
                "Settlement of %s for %s could not be observed: %s; "
                "transaction may still land",
                tx_hash,
                borrower,
                e,
            )
            return self._finish(
                CoordinatorState.TIMED_OUT,
                ExecutionResult.timed_out(
                    borrower,
                    tx_hash=tx_hash,
                    plan=plan,
                    reason=f"settlement not observed: {e}",
                ),
            )

        return self._classify(borrower, settlement, plan)

    def _classify(
        self, borrower: str, settlement: Settlement, plan: FundingPlan
    ) -> ExecutionResult:
        if settlement.status and settlement.repaid_amount > 0 and settlement.profit > 0:
            logger.info(
                "Liquidated %s in %s: repaid %d, profit %d",
                borrower,
                settlement.tx_hash,
                settlement.repaid_amount,
                settlement.profit,
            )
            return self._finish(
                CoordinatorState.SUCCEEDED,
                ExecutionResult.succeeded(
                    borrower,
                    settlement.repaid_amount,
                    settlement.profit,
                    tx_hash=settlement.tx_hash,
                    plan=plan,
                ),
            )

        reason = settlement.reason or "settled without repay or profit"
        logger.warning("Liquidation of %s reverted (%s): %s", borrower, settlement.tx_hash, reason)
        return self._finish(
            CoordinatorState.REVERTED,
            ExecutionResult.reverted(borrower, reason, tx_hash=settlement.tx_hash, plan=plan),
        )
