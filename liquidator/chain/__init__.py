"""EVM collaborators: swap quotes and the liquidator contract."""
from .executor import ContractExecutor
from .provider import connect
from .quoter import RouterQuoter

__all__ = ["ContractExecutor", "RouterQuoter", "connect"]
