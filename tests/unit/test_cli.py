"""Unit tests for CLI argument parsing and startup failures."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from conftest import BORROWER, USDT
from liquidator.cli import Components, build_components, build_parser, dry_run, main
from liquidator.config import AppConfig, FundingConfig
from liquidator.errors import DataSourceError, InsufficientRouteError
from liquidator.models import Account
from liquidator.notifications import TelegramNotifier
from liquidator.services import CapitalRouter, OpportunitySelector


class TestBuildParser:
    def test_run_command_default_interval(self) -> None:
        args = build_parser().parse_args(["run"])
        assert args.command == "run"
        assert args.interval is None

    def test_run_command_custom_interval(self) -> None:
        args = build_parser().parse_args(["run", "2.5"])
        assert args.interval == 2.5

    def test_scan_command(self) -> None:
        args = build_parser().parse_args(["scan"])
        assert args.command == "scan"

    def test_plan_command(self) -> None:
        args = build_parser().parse_args(["plan"])
        assert args.command == "plan"

    def test_config_flag(self) -> None:
        args = build_parser().parse_args(["--config", "/tmp/c.yaml", "scan"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "scan"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None


class TestMainStartup:
    def test_no_command_exits_nonzero(self) -> None:
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1

    def test_missing_config_file_is_fatal(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--config", str(tmp_path / "missing.yaml"), "run"])
        assert exc.value.code == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_missing_required_value_is_fatal(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("subgraph:\n  endpoints: []\n")
        with pytest.raises(SystemExit) as exc:
            main(["--config", str(cfg_file), "run"])
        assert exc.value.code == 1
        assert "contract address" in capsys.readouterr().err


class TestBuildComponents:
    def test_wires_pipeline_from_config(self, sample_app_config: AppConfig) -> None:
        components = build_components(sample_app_config)

        assert components.selector.close_factor == 0.5
        assert components.driver.poll_interval == 10.0
        assert components.source.endpoints == [
            "https://graph1.example.com",
            "https://graph2.example.com",
        ]

    def test_interval_override(self, sample_app_config: AppConfig) -> None:
        components = build_components(sample_app_config, interval=2.0)
        assert components.driver.poll_interval == 2.0

    def test_telegram_notifier_enabled(self, sample_app_config: AppConfig) -> None:
        components = build_components(sample_app_config)
        assert any(isinstance(n, TelegramNotifier) for n in components.driver._notifiers)


class TestDryRun:
    def _components(self, source: AsyncMock, router: CapitalRouter) -> Components:
        return Components(
            source=source, selector=OpportunitySelector(), router=router, driver=AsyncMock()
        )

    @pytest.mark.asyncio
    async def test_prints_plan_without_submitting(
        self,
        underwater_account: Account,
        usdt_funding: FundingConfig,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        source = AsyncMock()
        source.fetch_underwater_accounts.return_value = [underwater_account]
        components = self._components(source, CapitalRouter(AsyncMock(), usdt_funding))

        assert await dry_run(components) == 0

        out = capsys.readouterr().out
        assert BORROWER in out
        assert "jUSDT" in out
        assert "jLINK" in out
        assert "direct (no swap)" in out
        components.driver.run_tick.assert_not_called()

    @pytest.mark.asyncio
    async def test_swap_path_printed(
        self,
        underwater_account: Account,
        usdc_funding: FundingConfig,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        source = AsyncMock()
        source.fetch_underwater_accounts.return_value = [underwater_account]
        quoter = AsyncMock()
        quoter.quote_input_for_exact_output.return_value = 1_002_000_000
        components = self._components(source, CapitalRouter(quoter, usdc_funding))

        assert await dry_run(components) == 0
        assert f"-> {USDT}" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_no_route_reported(
        self,
        underwater_account: Account,
        usdc_funding: FundingConfig,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        source = AsyncMock()
        source.fetch_underwater_accounts.return_value = [underwater_account]
        router = AsyncMock()
        router.plan.side_effect = InsufficientRouteError("No swap route")
        components = self._components(source, router)

        assert await dry_run(components) == 0
        assert "unavailable" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_nothing_to_liquidate(self, capsys: pytest.CaptureFixture[str]) -> None:
        source = AsyncMock()
        source.fetch_underwater_accounts.return_value = []

        assert await dry_run(self._components(source, AsyncMock())) == 0
        assert "No liquidatable accounts" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_source_failure_exits_nonzero(self) -> None:
        source = AsyncMock()
        source.fetch_underwater_accounts.side_effect = DataSourceError("down")

        assert await dry_run(self._components(source, AsyncMock())) == 1
