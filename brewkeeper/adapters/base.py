"""
Adapter base — the contract between the executor and the brew process.

The executor only talks to brew through this protocol. Swapping the
real process adapter for the mock is how dry previews and tests run
the full sequence without touching the host.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from brewkeeper.core.models.action import Receipt
from brewkeeper.core.models.command import Command


class ExecutionContext(BaseModel):
    """Everything an adapter needs to run one command."""

    action_id: str
    command: Command
    timeout: int | None = None
    dry_run: bool = False

    @property
    def working_dir(self) -> str:
        return self.command.working_dir


class Adapter(ABC):
    """Abstract base class for command adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'brew', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying tool is available. Should never raise."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the command can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the command and return a receipt.

        MUST never raise exceptions. All failures are captured
        in the Receipt with status='failed'.
        """

    def run(self, context: ExecutionContext) -> Receipt:
        """Validate, then execute (or skip in dry-run mode)."""
        is_valid, error_msg = self.validate(context)
        if not is_valid:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action_id,
                error=f"Validation failed: {error_msg}",
                metadata={"argv": context.command.argv},
            )

        if context.dry_run:
            return Receipt.skip(
                adapter=self.name,
                action_id=context.action_id,
                reason=f"[dry-run] Would execute {context.command.display()}",
                metadata={"argv": context.command.argv, "dry_run": True},
            )

        return self.execute(context)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
