"""Lending subgraph account source."""
from .client import SubgraphClient

__all__ = ["SubgraphClient"]
