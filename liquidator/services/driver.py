"""Polling driver — fixed-interval, single-flight liquidation loop."""
from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from ..errors import DataSourceError
from ..interfaces.account_source import AccountSource
from ..interfaces.notifier import Notifier
from ..models import ExecutionResult, Outcome
from .coordinator import ExecutionCoordinator
from .selector import OpportunitySelector

logger = logging.getLogger(__name__)


class PollingDriver:
    """Pulls a fresh snapshot every tick and runs select -> route -> execute.

    Ticks never overlap: ``run_tick`` refuses to start while another tick is
    in progress, and ``run_forever`` awaits each tick before sleeping.
    """

    def __init__(
        self,
        source: AccountSource,
        selector: OpportunitySelector,
        coordinator: ExecutionCoordinator,
        poll_interval: float = 10.0,
        tick_timeout: float = 120.0,
        notifiers: list[Notifier] | None = None,
    ) -> None:
        self._source = source
        self._selector = selector
        self._coordinator = coordinator
        self.poll_interval = poll_interval
        self.tick_timeout = tick_timeout
        self._notifiers: list[Notifier] = list(notifiers or [])
        self._busy = False
        self._stopping = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    def stop(self) -> None:
        """Stop the loop once the current tick finishes."""
        self._stopping = True

    # ------------------------------------------------------------------
    # Notification dispatch
    # ------------------------------------------------------------------

    @staticmethod
    def _now_str() -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

    def _build_message(self, result: ExecutionResult) -> str:
        headline = {
            Outcome.SUCCEEDED: "🟢 Liquidation SUCCESS",
            Outcome.REVERTED: "🟡 Liquidation REVERTED",
            Outcome.TIMED_OUT: "🚨 Liquidation TIMED OUT — may still land",
        }.get(result.outcome, result.outcome.value)
        lines = [headline, "", f"Borrower: {result.borrower}"]
        if result.outcome is Outcome.SUCCEEDED:
            lines.append(f"Repaid: {result.repaid_amount}")
            lines.append(f"Profit: {result.profit}")
        elif result.reason:
            lines.append(f"Reason: {result.reason}")
        if result.tx_hash:
            lines.append(f"Tx: {result.tx_hash}")
        lines += ["", f"{self._now_str()} UTC"]
        return "\n".join(lines)

    async def _notify(self, result: ExecutionResult) -> None:
        if not result.submitted:
            return
        message = self._build_message(result)
        for notifier in self._notifiers:
            try:
                if result.outcome is Outcome.SUCCEEDED:
                    await notifier.send_log(message, silent=False)
                else:
                    await notifier.send_alert(
                        message, subject=f"Liquidation {result.outcome.value}"
                    )
            except Exception as e:
                logger.error("Notifier failed: %s", e)

    # ------------------------------------------------------------------
    # Core workflow
    # ------------------------------------------------------------------

    async def _evaluate(self) -> ExecutionResult | None:
        logger.info("Searching for account to liquidate...")
        try:
            accounts = await self._source.fetch_underwater_accounts()
        except DataSourceError as e:
            logger.error("Account query failed, skipping tick: %s", e)
            return None

        attempted = False
        for account in accounts:
            if not account.is_liquidatable:
                continue
            opportunity = self._selector.select(account)
            if opportunity is None:
                continue

            attempted = True
            result = await self._coordinator.execute(opportunity)
            if result.submitted:
                return result

        if not attempted:
            logger.info("No liquidatable accounts found in %d candidates", len(accounts))
        return None

    def _abandoned_result(self) -> ExecutionResult | None:
        abandoned = self._coordinator.take_abandoned()
        if abandoned is None:
            return None
        borrower, tx_hash = abandoned
        logger.error(
            "Liquidation of %s abandoned after broadcast (%s); transaction may still land",
            borrower,
            tx_hash,
        )
        return ExecutionResult.timed_out(
            borrower, tx_hash=tx_hash, reason="tick budget exceeded before settlement"
        )

    async def run_tick(self) -> ExecutionResult | None:
        """Run one poll cycle. At most one liquidation is submitted.

        Raises:
            RuntimeError: a tick is already in progress.
        """
        if self._busy:
            raise RuntimeError("Previous tick still in progress")

        self._busy = True
        try:
            result = await asyncio.wait_for(self._evaluate(), timeout=self.tick_timeout)
        except asyncio.TimeoutError:
            logger.error("Tick exceeded %.0fs budget, abandoned", self.tick_timeout)
            result = self._abandoned_result()
            if result is None:
                return None
        finally:
            self._busy = False

        if result is not None:
            await self._notify(result)
        logger.info("Finished searching through accounts")
        return result

    async def run_forever(self) -> None:
        """Run ticks at a fixed interval until ``stop()`` is called."""
        logger.info(
            "Starting liquidation loop (querying every %.0f seconds)", self.poll_interval
        )
        self._stopping = False

        while not self._stopping:
            started = time.monotonic()
            try:
                await self.run_tick()
            except Exception as e:
                logger.exception("Error in liquidation loop: %s", e)
            if self._stopping:
                break
            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, self.poll_interval - elapsed))

        logger.info("Liquidation loop stopped")
