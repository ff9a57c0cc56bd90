"""AsyncWeb3 connection factory."""
import logging

from web3 import AsyncWeb3

from ..config import ChainConfig

logger = logging.getLogger(__name__)


def connect(config: ChainConfig) -> AsyncWeb3:
    """Build an AsyncWeb3 instance bounded by the configured request timeout."""
    w3 = AsyncWeb3(
        AsyncWeb3.AsyncHTTPProvider(
            config.rpc_url, request_kwargs={"timeout": config.rpc_timeout}
        )
    )
    logger.info("RPC provider: %s...", config.rpc_url[:50])
    return w3
