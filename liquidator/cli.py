"""Command-line interface for the liquidation agent."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass

from .chain import ContractExecutor, RouterQuoter, connect
from .config import AppConfig, load_config
from .errors import ConfigError, DataSourceError, RoutingError
from .interfaces.notifier import Notifier
from .logging_setup import configure_logging
from .notifications import TelegramNotifier
from .services import (
    CapitalRouter,
    ExecutionCoordinator,
    OpportunitySelector,
    PollingDriver,
)
from .subgraph import SubgraphClient

logger = logging.getLogger(__name__)


@dataclass
class Components:
    source: SubgraphClient
    selector: OpportunitySelector
    router: CapitalRouter
    driver: PollingDriver


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="liquidator",
        description="Flash-loan liquidation agent for Compound-style lending markets",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    run_parser = sub.add_parser("run", help="Continuous liquidation loop")
    run_parser.add_argument(
        "interval",
        nargs="?",
        type=float,
        default=None,
        help="Poll interval in seconds (overrides config)",
    )
    sub.add_parser("scan", help="Single poll cycle, liquidating at most one account")
    sub.add_parser("plan", help="Dry run: select and route without submitting")

    return parser


def build_components(config: AppConfig, interval: float | None = None) -> Components:
    """Wire collaborators from configuration."""
    w3 = connect(config.chain)
    source = SubgraphClient(config.subgraph)
    selector = OpportunitySelector(config.bot.close_factor)
    router = CapitalRouter(
        RouterQuoter(w3, config.swap.router_address),
        config.funding,
        wrapped_native=config.swap.wrapped_native,
        slippage_bps=config.bot.slippage_bps,
    )
    coordinator = ExecutionCoordinator(
        router,
        ContractExecutor(w3, config.chain, config.liquidator),
        settlement_timeout=config.bot.settlement_timeout_seconds,
    )

    notifiers: list[Notifier] = []
    if config.notifications.telegram.enabled:
        notifiers.append(TelegramNotifier(config.notifications.telegram))

    driver = PollingDriver(
        source,
        selector,
        coordinator,
        poll_interval=interval or config.bot.poll_interval_seconds,
        tick_timeout=config.bot.tick_timeout_seconds,
        notifiers=notifiers,
    )
    return Components(source, selector, router, driver)


async def dry_run(components: Components) -> int:
    """Print the opportunity and funding plan the next tick would act on."""
    try:
        accounts = await components.source.fetch_underwater_accounts()
    except DataSourceError as e:
        print(f"Account query failed: {e}")
        return 1

    candidates = [a for a in accounts if a.is_liquidatable]
    opportunity = components.selector.select_first(candidates)
    if opportunity is None:
        print(f"No liquidatable accounts found ({len(candidates)} underwater)")
        return 0

    print(f"Borrower:  {opportunity.borrower}")
    print(f"Repay:     {opportunity.repay.market.symbol} (${opportunity.repay_value_usd:,.2f})")
    print(f"Seize:     {opportunity.seize.market.symbol} (${opportunity.seize_value_usd:,.2f})")
    try:
        plan = await components.router.plan(opportunity)
    except RoutingError as e:
        print(f"Routing:   unavailable ({e})")
        return 0

    print(f"Flash:     {plan.amount_in_units} {plan.funding_symbol}")
    print(f"Path:      {' -> '.join(plan.path) if plan.requires_swap else 'direct (no swap)'}")
    return 0


async def _run(args: argparse.Namespace, config: AppConfig) -> int:
    """Execute the selected command."""
    components = build_components(config, getattr(args, "interval", None))

    if args.command == "run":
        await components.driver.run_forever()
    elif args.command == "scan":
        result = await components.driver.run_tick()
        if result is None:
            logger.info("No liquidation submitted this cycle")
        else:
            logger.info("Outcome: %s %s", result.outcome.value, result.reason)
    elif args.command == "plan":
        return await dry_run(components)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        code = asyncio.run(_run(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        code = 0
    sys.exit(code)
