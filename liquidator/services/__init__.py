"""Service modules"""
from .coordinator import CoordinatorState, ExecutionCoordinator
from .driver import PollingDriver
from .router import CapitalRouter
from .selector import OpportunitySelector

__all__ = [
    "CapitalRouter",
    "CoordinatorState",
    "ExecutionCoordinator",
    "OpportunitySelector",
    "PollingDriver",
]
