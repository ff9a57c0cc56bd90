"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path

import pytest

from liquidator.config import (
    AppConfig,
    BotConfig,
    ChainConfig,
    FundingConfig,
    LiquidatorContractConfig,
    NotificationsConfig,
    SubgraphConfig,
    SwapConfig,
    TelegramConfig,
)
from liquidator.models import Account, Market, Position

USDT = "0xc7198437980c041c805A1EDcbA50c1Ce5db95118"
LINK = "0x5947BB275c521040051D82396192181b413227A3"
WAVAX = "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7"
USDC = "0xA7D7079b0FEaD91F3e65f86E8915Cb59c1a4C664"

JUSDT = "0x8b650e26404ac6837539ca96812f0123601e4448"
JLINK = "0x585e7bc75089ed111b656faa7aeb1104f5b96c15"
JAVAX = "0xc22f01ddc8010ee05574028528614634684ec29e"

BORROWER = "0x00000000000000000000000000000000000000b0"


# ---------------------------------------------------------------------------
# Model builders
# ---------------------------------------------------------------------------


def make_market(
    market_id: str,
    symbol: str,
    underlying: str,
    price: str,
    decimals: int = 18,
    underlying_symbol: str = "",
) -> Market:
    return Market(
        id=market_id,
        symbol=symbol,
        underlying_symbol=underlying_symbol or symbol.lstrip("j"),
        underlying_address=underlying,
        collateral_factor=Decimal("0.75"),
        underlying_price_usd=Decimal(price),
        exchange_rate=Decimal("0.02"),
        reserve_factor=Decimal("0.2"),
        underlying_decimals=decimals,
    )


def make_position(
    market: Market,
    borrow: str = "0",
    supply: str = "0",
    entered: bool = False,
    borrower: str = BORROWER,
) -> Position:
    return Position(
        id=f"{market.id}-{borrower}",
        market=market,
        borrow_balance=Decimal(borrow),
        supply_balance=Decimal(supply),
        entered_market=entered,
    )


def make_account(
    *positions: Position, health: str = "0.8", borrower: str = BORROWER
) -> Account:
    return Account(
        id=borrower,
        health=Decimal(health),
        total_borrow_value_usd=sum((p.borrow_value_usd for p in positions), Decimal(0)),
        total_collateral_value_usd=sum(
            (p.supply_value_usd for p in positions), Decimal(0)
        ),
        positions=tuple(positions),
    )


@pytest.fixture()
def usdt_market() -> Market:
    return make_market(JUSDT, "jUSDT", USDT, "1.0", decimals=6, underlying_symbol="USDT.e")


@pytest.fixture()
def link_market() -> Market:
    return make_market(JLINK, "jLINK", LINK, "15", decimals=18, underlying_symbol="LINK.e")


@pytest.fixture()
def underwater_account(usdt_market: Market, link_market: Market) -> Account:
    """Health 0.8, 1000 USDT borrowed, 100 LINK @ $15 posted as collateral."""
    return make_account(
        make_position(usdt_market, borrow="1000"),
        make_position(link_market, supply="100", entered=True),
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def usdt_funding() -> FundingConfig:
    return FundingConfig(symbol="USDT.e", address=USDT, decimals=6)


@pytest.fixture()
def usdc_funding() -> FundingConfig:
    return FundingConfig(symbol="USDC.e", address=USDC, decimals=6)


@pytest.fixture()
def sample_app_config(usdc_funding: FundingConfig) -> AppConfig:
    return AppConfig(
        bot=BotConfig(poll_interval_seconds=10.0, settlement_timeout_seconds=5.0),
        subgraph=SubgraphConfig(
            endpoints=("https://graph1.example.com", "https://graph2.example.com"),
            timeout=10,
        ),
        chain=ChainConfig(rpc_url="https://rpc.example.com", chain_id=43114),
        liquidator=LiquidatorContractConfig(
            contract_address="0x1111111111111111111111111111111111111111",
            private_key="0x" + "11" * 32,
        ),
        swap=SwapConfig(
            router_address="0x60aE616a2155Ee3d9A68541Ba4544862310933d4",
            wrapped_native=WAVAX,
        ),
        funding=usdc_funding,
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    bot:
      poll_interval_seconds: 5
      tick_timeout_seconds: 60
      settlement_timeout_seconds: 30
      close_factor: 0.5
      slippage_bps: 30
    subgraph:
      endpoints: ["https://graph.example.com"]
      timeout: 10
    chain:
      rpc_url: "https://rpc.example.com"
      chain_id: 43114
    liquidator:
      contract_address: "0x1111111111111111111111111111111111111111"
      private_key: "0xkey"
    swap:
      router_address: "0x60aE616a2155Ee3d9A68541Ba4544862310933d4"
      wrapped_native: "0xB31f66AA3C1e785363F0875A1B74E27b85FD66c7"
    funding:
      symbol: USDC.e
      address: "0xA7D7079b0FEaD91F3e65f86E8915Cb59c1a4C664"
      decimals: 6
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: 999
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Sample subgraph data
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_subgraph_account() -> dict:
    return {
        "id": BORROWER,
        "health": "0.8",
        "totalBorrowValueInUSD": "1000",
        "totalCollateralValueInUSD": "1500",
        "tokens": [
            {
                "id": f"{JUSDT}-{BORROWER}",
                "symbol": "jUSDT",
                "market": {
                    "name": "Banker Joe USD Tether",
                    "symbol": "jUSDT",
                    "underlyingSymbol": "USDT.e",
                    "underlyingAddress": USDT,
                    "collateralFactor": "0.8",
                    "underlyingPriceUSD": "1.0",
                    "exchangeRate": "0.0201",
                    "reserveFactor": "0.2",
                    "underlyingDecimals": 6,
                },
                "borrowBalanceUnderlying": "1000",
                "supplyBalanceUnderlying": "0",
                "enteredMarket": False,
            },
            {
                "id": f"{JLINK}-{BORROWER}",
                "symbol": "jLINK",
                "market": {
                    "name": "Banker Joe Link",
                    "symbol": "jLINK",
                    "underlyingSymbol": "LINK.e",
                    "underlyingAddress": LINK,
                    "collateralFactor": "0.6",
                    "underlyingPriceUSD": "15",
                    "exchangeRate": "0.0200",
                    "reserveFactor": "0.25",
                    "underlyingDecimals": 18,
                },
                "borrowBalanceUnderlying": "0",
                "supplyBalanceUnderlying": "100",
                "enteredMarket": True,
            },
        ],
    }
