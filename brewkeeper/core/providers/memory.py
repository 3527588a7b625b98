"""
In-memory provider — recorded state that lives only for the process.

Used by tests and as a scratch store. ``init()`` never fails unless
the provider was built with ``fail_init=True``.
"""

from __future__ import annotations

from brewkeeper.core.engine.errors import ProviderInitError
from brewkeeper.core.models.dependency import Dependency
from brewkeeper.core.providers.base import DatastoreProvider, _recorded_name


class InMemoryProvider(DatastoreProvider):
    """Dictionary-backed datastore provider."""

    def __init__(
        self,
        recorded: dict[str, set[str]] | None = None,
        fail_init: bool = False,
    ):
        self._records: dict[str, set[str]] = {
            label: set(ids) for label, ids in (recorded or {}).items()
        }
        self._fail_init = fail_init
        self.initialized = False

    @property
    def name(self) -> str:
        return "memory"

    def init(self) -> None:
        if self._fail_init:
            raise ProviderInitError("In-memory datastore configured to fail")
        self.initialized = True

    def recorded(self, label: str) -> set[str]:
        return set(self._records.get(label, set()))

    def record_installed(self, dependency: Dependency) -> None:
        ids = self._records.setdefault(dependency.category.label, set())
        stale = {i for i in ids if _recorded_name(i) == dependency.name}
        ids -= stale
        ids.add(dependency.coordinate)

    def record_removed(self, identifier: str, label: str) -> None:
        self._records.get(label, set()).discard(identifier)
