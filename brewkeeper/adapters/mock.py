"""
Mock adapter — test double for the brew process.

Used in --mock mode and in tests to run the full apply sequence
without touching the host. Returns success by default; individual
action ids can be configured to fail.
"""

from __future__ import annotations

from brewkeeper.adapters.base import Adapter, ExecutionContext
from brewkeeper.core.models.action import Receipt
from brewkeeper.core.models.command import Command


class MockAdapter(Adapter):
    """Records every command it receives instead of running it."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        """Number of times execute has been called."""
        return len(self._call_log)

    @property
    def commands(self) -> list[Command]:
        return [ctx.command for ctx in self._call_log]

    @property
    def argv_log(self) -> list[list[str]]:
        """Argument vectors (without the binary) in call order."""
        return [list(ctx.command.args) for ctx in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        """Set a custom response for a specific action ID."""
        self._responses[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        """Configure a specific action to fail."""
        self._responses[action_id] = Receipt.failure(
            adapter=self._name,
            action_id=action_id,
            error=error,
            metadata={"return_code": 1},
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        if context.action_id in self._responses:
            return self._responses[context.action_id]

        return Receipt.success(
            adapter=self._name,
            action_id=context.action_id,
            output=self._default_output,
            metadata={"mock": True, "argv": context.command.argv},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
