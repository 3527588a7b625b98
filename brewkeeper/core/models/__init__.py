"""
Domain models — Pydantic types for brewkeeper.

All models are re-exported here for convenient access:

    from brewkeeper.core.models import Category, Dependency, Command, Receipt
"""

from brewkeeper.core.models.action import Receipt
from brewkeeper.core.models.command import Command, Operation
from brewkeeper.core.models.dependency import (
    Category,
    Dependency,
    DependencyCollection,
)
from brewkeeper.core.models.state import InstalledState, OperationRecord

__all__ = [
    # dependency.py
    "Category",
    # command.py
    "Command",
    "Dependency",
    "DependencyCollection",
    # state.py
    "InstalledState",
    "Operation",
    "OperationRecord",
    # action.py
    "Receipt",
]
