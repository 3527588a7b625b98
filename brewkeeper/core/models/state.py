"""
InstalledState — the recorded view of what brewkeeper has installed.

Serialized to .state/installed.json by the JSON datastore. Each
category label maps to the sorted list of recorded identifiers
(``group:name:version``).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class OperationRecord(BaseModel):
    """Summary of the last apply run."""

    operation_id: str = ""
    started_at: str = ""
    ended_at: str = ""
    status: str = ""  # ok, failed, dry-run
    stage: str = ""  # last stage reached
    removed: int = 0
    installed: int = 0
    error: str | None = None


class InstalledState(BaseModel):
    """Root state document for the recorded package set."""

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = 1

    # ── Timestamps ───────────────────────────────────────────────
    created_at: str = Field(default_factory=_now_iso)
    updated_at: str = Field(default_factory=_now_iso)

    # ── Recorded packages, keyed by category label ───────────────
    dependencies: dict[str, list[str]] = Field(default_factory=dict)

    # ── Last operation ───────────────────────────────────────────
    last_operation: OperationRecord = Field(default_factory=OperationRecord)

    # ── Extensible metadata ──────────────────────────────────────
    metadata: dict[str, Any] = Field(default_factory=dict)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = _now_iso()

    def recorded(self, label: str) -> set[str]:
        return set(self.dependencies.get(label, []))

    def add(self, label: str, identifier: str) -> None:
        """Record an identifier under a label (no duplicates)."""
        current = self.recorded(label)
        current.add(identifier)
        self.dependencies[label] = sorted(current)

    def discard(self, label: str, identifier: str) -> None:
        """Remove an identifier from a label, if present."""
        current = self.recorded(label)
        current.discard(identifier)
        self.dependencies[label] = sorted(current)
