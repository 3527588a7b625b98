"""
Command model — one fully-resolved brew invocation.

Commands are built once by the command builder and never modified.
The executor hands each one to the process adapter exactly once.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from brewkeeper.core.models.dependency import Category


class Operation(str, Enum):
    """The brew operations the reconciler issues."""

    UPDATE_SELF = "update"
    UPGRADE_ALL = "upgrade"
    UNINSTALL = "uninstall"
    INSTALL = "install"


class Command(BaseModel):
    """An immutable external-process invocation."""

    model_config = ConfigDict(frozen=True)

    binary: str
    working_dir: str
    args: tuple[str, ...]

    # Context for logging and error reporting
    operation: Operation
    category: Category | None = None
    package: str | None = None

    @property
    def argv(self) -> list[str]:
        return [self.binary, *self.args]

    def display(self) -> str:
        """Short human-readable form, e.g. ``brew cask install firefox``."""
        return " ".join(["brew", *self.args])
