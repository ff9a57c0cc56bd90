"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BotConfig:
    poll_interval_seconds: float = 10.0
    tick_timeout_seconds: float = 120.0
    settlement_timeout_seconds: float = 60.0
    close_factor: float = 0.5
    slippage_bps: int = 50


@dataclass(frozen=True)
class SubgraphConfig:
    endpoints: tuple[str, ...] = ()
    timeout: int = 30


@dataclass(frozen=True)
class ChainConfig:
    rpc_url: str = ""
    chain_id: int = 43114
    rpc_timeout: int = 30


@dataclass(frozen=True)
class LiquidatorContractConfig:
    contract_address: str = ""
    private_key: str = field(default="", repr=False)
    gas_multiplier: float = 1.2
    fallback_gas_limit: int = 2_500_000


@dataclass(frozen=True)
class SwapConfig:
    router_address: str = ""
    wrapped_native: str = ""


@dataclass(frozen=True)
class FundingConfig:
    symbol: str = "USDC.e"
    address: str = ""
    decimals: int = 6


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    bot: BotConfig = field(default_factory=BotConfig)
    subgraph: SubgraphConfig = field(default_factory=SubgraphConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    liquidator: LiquidatorContractConfig = field(default_factory=LiquidatorContractConfig)
    swap: SwapConfig = field(default_factory=SwapConfig)
    funding: FundingConfig = field(default_factory=FundingConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_bot(raw: dict[str, Any]) -> BotConfig:
    return BotConfig(
        poll_interval_seconds=float(raw.get("poll_interval_seconds", 10.0)),
        tick_timeout_seconds=float(raw.get("tick_timeout_seconds", 120.0)),
        settlement_timeout_seconds=float(raw.get("settlement_timeout_seconds", 60.0)),
        close_factor=float(raw.get("close_factor", 0.5)),
        slippage_bps=int(raw.get("slippage_bps", 50)),
    )


def _build_subgraph(raw: dict[str, Any]) -> SubgraphConfig:
    endpoints = raw.get("endpoints", [])
    if isinstance(endpoints, str):
        endpoints = [e.strip() for e in endpoints.split(",")]
    return SubgraphConfig(
        endpoints=tuple(e for e in endpoints if e),
        timeout=int(raw.get("timeout", 30)),
    )


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    return ChainConfig(
        rpc_url=raw.get("rpc_url", ""),
        chain_id=int(raw.get("chain_id", 43114)),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
    )


def _build_liquidator(raw: dict[str, Any]) -> LiquidatorContractConfig:
    return LiquidatorContractConfig(
        contract_address=raw.get("contract_address", ""),
        private_key=raw.get("private_key", ""),
        gas_multiplier=float(raw.get("gas_multiplier", 1.2)),
        fallback_gas_limit=int(raw.get("fallback_gas_limit", 2_500_000)),
    )


def _build_swap(raw: dict[str, Any]) -> SwapConfig:
    return SwapConfig(
        router_address=raw.get("router_address", ""),
        wrapped_native=raw.get("wrapped_native", "") or "",
    )


def _build_funding(raw: dict[str, Any]) -> FundingConfig:
    return FundingConfig(
        symbol=raw.get("symbol", "USDC.e"),
        address=raw.get("address", ""),
        decimals=int(raw.get("decimals", 6)),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).

    Raises:
        FileNotFoundError: the config file does not exist.
        ConfigError: a required value is missing or out of range.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    try:
        cfg = AppConfig(
            bot=_build_bot(raw.get("bot") or {}),
            subgraph=_build_subgraph(raw.get("subgraph") or {}),
            chain=_build_chain(raw.get("chain") or {}),
            liquidator=_build_liquidator(raw.get("liquidator") or {}),
            swap=_build_swap(raw.get("swap") or {}),
            funding=_build_funding(raw.get("funding") or {}),
            notifications=_build_notifications(raw.get("notifications") or {}),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Malformed configuration value: {e}") from e

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise ConfigError on invalid configuration."""
    if not cfg.liquidator.contract_address:
        raise ConfigError("Liquidator contract address is not set")
    if not cfg.liquidator.private_key:
        raise ConfigError("Signing key (liquidator.private_key) is not set")
    if not cfg.funding.address:
        raise ConfigError(f"Funding asset '{cfg.funding.symbol}' has no address")
    if not cfg.chain.rpc_url:
        raise ConfigError("Chain RPC url is not set")
    if not cfg.subgraph.endpoints:
        raise ConfigError("At least one subgraph endpoint must be configured")
    if not cfg.swap.router_address:
        raise ConfigError("Swap router address is not set")

    if cfg.bot.poll_interval_seconds <= 0:
        raise ConfigError("Poll interval must be positive")
    if cfg.bot.tick_timeout_seconds <= 0 or cfg.bot.settlement_timeout_seconds <= 0:
        raise ConfigError("Timeouts must be positive")
    if cfg.bot.tick_timeout_seconds <= cfg.bot.settlement_timeout_seconds:
        raise ConfigError(
            "Tick timeout must exceed settlement timeout "
            f"({cfg.bot.tick_timeout_seconds} <= {cfg.bot.settlement_timeout_seconds})"
        )
    if not 0 < cfg.bot.close_factor <= 1:
        raise ConfigError(
            f"Close factor must be within (0, 1], got {cfg.bot.close_factor}"
        )
    if cfg.bot.slippage_bps < 0:
        raise ConfigError("Slippage buffer cannot be negative")
