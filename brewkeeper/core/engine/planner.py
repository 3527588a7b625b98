"""
Reconciliation planner — which packages go, which packages come.

The datastore provider owns the diff itself. The planner
makes sure it is only ever asked about non-transitive collections and
offers a read-only preview for the ``plan`` command.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from brewkeeper.core.engine.commands import extract_package_name
from brewkeeper.core.engine.errors import MalformedRecordError
from brewkeeper.core.models.dependency import Category, Dependency, DependencyCollection
from brewkeeper.core.providers.base import DatastoreProvider

logger = logging.getLogger(__name__)


def _require_direct(collection: DependencyCollection) -> None:
    if collection.transitive:
        raise ValueError(
            f"Collection '{collection.label}' is transitive; "
            "only direct dependencies can be reconciled"
        )


def obsolete_names(
    provider: DatastoreProvider,
    collection: DependencyCollection,
) -> set[str]:
    """Recorded identifiers that are no longer declared."""
    _require_direct(collection)
    obsolete = provider.find_all_obsolete_deps(collection.dependencies, collection.label)
    logger.debug("Obsolete %s packages: %s", collection.label, sorted(obsolete))
    return obsolete


def incoming_deps(
    provider: DatastoreProvider,
    collection: DependencyCollection,
) -> set[Dependency]:
    """Declared dependencies that are not recorded yet."""
    _require_direct(collection)
    incoming = provider.find_all_incoming_deps(collection.dependencies, collection.label)
    logger.debug("Incoming %s packages: %s", collection.label, sorted(d.name for d in incoming))
    return incoming


@dataclass
class ReconciliationPlan:
    """Preview of what an apply run would change."""

    obsolete: dict[Category, list[str]] = field(default_factory=dict)
    incoming: dict[Category, list[Dependency]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not any(self.obsolete.values()) and not any(self.incoming.values())

    def to_dict(self) -> dict:
        def _name(identifier: str) -> str:
            try:
                return extract_package_name(identifier)
            except MalformedRecordError:
                return identifier

        return {
            "obsolete": {
                c.label: [_name(i) for i in ids] for c, ids in self.obsolete.items()
            },
            "incoming": {
                c.label: [d.name for d in deps] for c, deps in self.incoming.items()
            },
        }


def preview(
    provider: DatastoreProvider,
    collections: list[DependencyCollection],
) -> ReconciliationPlan:
    """Compute both diffs for every collection without changing anything.

    The provider must already be initialized. Collections are treated
    as direct-only; their transitive flag is switched off.
    """
    plan = ReconciliationPlan()
    for collection in collections:
        collection.transitive = False
        plan.obsolete[collection.category] = sorted(obsolete_names(provider, collection))
        plan.incoming[collection.category] = sorted(
            incoming_deps(provider, collection), key=lambda d: d.name
        )
    return plan
