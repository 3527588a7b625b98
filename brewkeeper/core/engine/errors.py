"""
Reconciliation errors.

Every error carries where the run was when it failed: the stage, the
category being processed and the package in flight. ``str()`` renders
that context so the CLI can report it as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from brewkeeper.core.models.action import Receipt
    from brewkeeper.core.models.dependency import Category


class ReconcileError(Exception):
    """Base class for all failures that abort an apply run."""

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        category: Category | None = None,
        package: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.category = category
        self.package = package

    def with_context(
        self,
        *,
        stage: str | None = None,
        category: Category | None = None,
        package: str | None = None,
    ) -> ReconcileError:
        """Fill in any context fields that are still unset."""
        self.stage = self.stage or stage
        self.category = self.category or category
        self.package = self.package or package
        return self

    def to_dict(self) -> dict:
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "stage": self.stage,
            "category": self.category.label if self.category else None,
            "package": self.package,
        }

    def __str__(self) -> str:
        where = []
        if self.stage:
            where.append(f"stage={self.stage}")
        if self.category:
            where.append(f"category={self.category.label}")
        if self.package:
            where.append(f"package={self.package}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class ProviderInitError(ReconcileError):
    """The state datastore could not be opened."""


class MalformedRecordError(ReconcileError):
    """A recorded identifier is not ``group:name:version``."""

    def __init__(self, identifier: str, **kwargs):
        super().__init__(
            f"Malformed recorded identifier {identifier!r}, expected group:name:version",
            **kwargs,
        )
        self.identifier = identifier


class ProcessExecutionError(ReconcileError):
    """A brew invocation exited non-zero, timed out, or could not start."""

    def __init__(self, receipt: Receipt, **kwargs):
        super().__init__(receipt.error or "brew command failed", **kwargs)
        self.receipt = receipt

    @property
    def return_code(self) -> int | None:
        return self.receipt.metadata.get("return_code")
