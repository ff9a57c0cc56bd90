"""Flash-loan liquidation agent for Compound-style lending markets."""

__version__ = "0.1.0"
