"""
JSON file provider — recorded state persisted to .state/installed.json.

Every mutation is written through immediately (atomic rename), so a
run that fails half-way leaves a record of exactly what completed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from brewkeeper.core.engine.errors import ProviderInitError
from brewkeeper.core.models.dependency import Dependency
from brewkeeper.core.models.state import InstalledState, OperationRecord
from brewkeeper.core.persistence.state_file import StateFileError, load_state, save_state
from brewkeeper.core.providers.base import DatastoreProvider, _recorded_name

logger = logging.getLogger(__name__)


class JsonFileProvider(DatastoreProvider):
    """Datastore provider backed by a single JSON state file."""

    def __init__(self, path: Path):
        self._path = path
        self._state: InstalledState | None = None

    @property
    def name(self) -> str:
        return "json"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def state(self) -> InstalledState:
        if self._state is None:
            raise ProviderInitError(f"Datastore {self._path} used before init()")
        return self._state

    def init(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProviderInitError(f"Cannot create state directory for {self._path}: {e}") from e

        try:
            self._state = load_state(self._path)
        except StateFileError as e:
            raise ProviderInitError(str(e)) from e

        logger.debug(
            "Datastore %s ready (%s)",
            self._path,
            ", ".join(f"{k}={len(v)}" for k, v in self._state.dependencies.items()) or "empty",
        )

    def recorded(self, label: str) -> set[str]:
        return self.state.recorded(label)

    def record_installed(self, dependency: Dependency) -> None:
        label = dependency.category.label
        for identifier in self.state.recorded(label):
            if _recorded_name(identifier) == dependency.name:
                self.state.discard(label, identifier)
        self.state.add(label, dependency.coordinate)
        save_state(self.state, self._path)

    def record_removed(self, identifier: str, label: str) -> None:
        self.state.discard(label, identifier)
        save_state(self.state, self._path)

    def record_operation(self, record: OperationRecord) -> None:
        """Store the summary of the latest apply run."""
        self.state.last_operation = record
        save_state(self.state, self._path)

    @property
    def last_operation(self) -> OperationRecord | None:
        if self._state is None or not self._state.last_operation.operation_id:
            return None
        return self._state.last_operation
