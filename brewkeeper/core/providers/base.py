"""
Datastore provider base — the contract for recorded package state.

The executor never reads or writes state files directly. It asks a
provider which recorded packages are obsolete and which declared
packages are incoming, and tells it about every package that was
actually removed or installed.

Diffing is by (category, name): a declared ``homebrew:git:2.44``
matches a recorded ``homebrew:git:2.43``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from brewkeeper.core.models.dependency import Dependency
from brewkeeper.core.models.state import OperationRecord


def _recorded_name(identifier: str) -> str | None:
    """Name part of a recorded ``group:name:version`` identifier.

    Returns None for malformed identifiers so they always count as
    obsolete; the command builder rejects them loudly at uninstall.
    """
    parts = identifier.split(":")
    if len(parts) != 3:
        return None
    return parts[1]


class DatastoreProvider(ABC):
    """Abstract base class for recorded-state backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The provider identifier (e.g., 'json', 'memory')."""

    @abstractmethod
    def init(self) -> None:
        """Prepare the datastore for a run.

        Raises:
            ProviderInitError: If the backing store is unreachable or corrupt.
        """

    @abstractmethod
    def recorded(self, label: str) -> set[str]:
        """All recorded identifiers for a category label."""

    @abstractmethod
    def record_installed(self, dependency: Dependency) -> None:
        """Record a dependency as installed, replacing any older version."""

    @abstractmethod
    def record_removed(self, identifier: str, label: str) -> None:
        """Forget a recorded identifier."""

    def record_operation(self, record: OperationRecord) -> None:
        """Store the summary of the latest apply run (optional)."""
        self._last_operation = record

    @property
    def last_operation(self) -> OperationRecord | None:
        return getattr(self, "_last_operation", None)

    def find_all_obsolete_deps(
        self,
        declared: Iterable[Dependency],
        label: str,
    ) -> set[str]:
        """Recorded identifiers whose name is no longer declared."""
        declared_names = {d.name for d in declared}
        return {
            identifier
            for identifier in self.recorded(label)
            if _recorded_name(identifier) not in declared_names
        }

    def find_all_incoming_deps(
        self,
        declared: Iterable[Dependency],
        label: str,
    ) -> set[Dependency]:
        """Declared dependencies whose name is not recorded yet."""
        recorded_names = {
            name
            for name in (_recorded_name(i) for i in self.recorded(label))
            if name is not None
        }
        return {d for d in declared if d.name not in recorded_names}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
