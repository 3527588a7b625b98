"""Adapters — the process boundary to the brew binary.

Public re-exports for convenient access.
"""

from brewkeeper.adapters.base import Adapter, ExecutionContext
from brewkeeper.adapters.mock import MockAdapter
from brewkeeper.adapters.shell.command import BrewCommandAdapter

__all__ = [
    "Adapter",
    "BrewCommandAdapter",
    "ExecutionContext",
    "MockAdapter",
]
