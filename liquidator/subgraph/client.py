"""Lending subgraph client with endpoint fallback."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import SubgraphConfig
from ..errors import DataSourceError
from ..models import Account
from . import parser

logger = logging.getLogger(__name__)

UNDERWATER_ACCOUNTS_QUERY = """
query {
  accounts(where: {health_gt: 0, health_lt: 1, totalBorrowValueInUSD_gt: 0}) {
    id
    health
    totalBorrowValueInUSD
    totalCollateralValueInUSD
    tokens {
      id
      symbol
      market {
        id
        name
        symbol
        underlyingSymbol
        underlyingAddress
        collateralFactor
        underlyingPriceUSD
        exchangeRate
        reserveFactor
        underlyingDecimals
      }
      borrowBalanceUnderlying
      supplyBalanceUnderlying
      enteredMarket
    }
  }
}
"""


class SubgraphClient:
    """GraphQL client for the lending subgraph with automatic endpoint fallback."""

    def __init__(self, config: SubgraphConfig) -> None:
        self.endpoints = list(config.endpoints)
        self.timeout = config.timeout
        self.current_endpoint_index = 0

    async def query(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run a GraphQL query, falling back to alternative endpoints.

        Raises:
            DataSourceError: every endpoint failed or returned errors.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            index = (self.current_endpoint_index + attempt) % len(self.endpoints)
            url = self.endpoints[index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        if response.status != 200:
                            raise RuntimeError(f"HTTP {response.status}")
                        result = await response.json()
                        if result.get("errors"):
                            raise RuntimeError(f"GraphQL errors: {result['errors']}")

                        if index != self.current_endpoint_index:
                            logger.info("Switched to subgraph endpoint: %s", url)
                            self.current_endpoint_index = index

                        return result.get("data") or {}
            except Exception as e:
                last_error = e
                logger.warning("Subgraph endpoint %s failed: %s", url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise DataSourceError(f"All subgraph endpoints failed. Last error: {last_error}")

    async def fetch_underwater_accounts(self) -> list[Account]:
        """Fetch accounts with 0 < health < 1 and positive borrow value."""
        data = await self.query(UNDERWATER_ACCOUNTS_QUERY)
        accounts = parser.parse_accounts(data)
        logger.info("Fetched %d underwater accounts", len(accounts))
        return accounts
