"""
Status and plan use cases — read-only views of config + recorded state.

``get_status`` lists what is recorded as installed next to what is
declared. ``get_plan`` previews what the next apply would remove and
install. Neither runs brew or writes to the datastore.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from brewkeeper.core.config.loader import ConfigError, load_config
from brewkeeper.core.engine.errors import ReconcileError
from brewkeeper.core.engine.planner import ReconciliationPlan, preview
from brewkeeper.core.models.dependency import Category
from brewkeeper.core.models.settings import BrewkeeperConfig
from brewkeeper.core.models.state import OperationRecord
from brewkeeper.core.providers.base import DatastoreProvider
from brewkeeper.core.providers.factory import create_provider


@dataclass
class StatusResult:
    """Recorded vs declared packages."""

    config: BrewkeeperConfig | None = None
    recorded: dict[str, list[str]] = field(default_factory=dict)
    declared: dict[str, list[str]] = field(default_factory=dict)
    last_operation: OperationRecord | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        if self.error:
            return {"error": self.error}

        return {
            "homebrew_root": str(self.config.homebrew_root) if self.config else "",
            "datastore": self.config.datastore.type if self.config else "",
            "recorded": self.recorded,
            "declared": self.declared,
            "last_operation": (
                self.last_operation.model_dump(mode="json") if self.last_operation else None
            ),
        }


@dataclass
class PlanResult:
    """Preview of the next apply."""

    config: BrewkeeperConfig | None = None
    plan: ReconciliationPlan | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return self.plan.to_dict() if self.plan else {}


def _open(
    config_path: Path | None,
    provider: DatastoreProvider | None,
) -> tuple[BrewkeeperConfig, DatastoreProvider]:
    config = load_config(config_path)
    if provider is None:
        provider = create_provider(config)
    provider.init()
    return config, provider


def get_status(
    config_path: Path | None = None,
    provider: DatastoreProvider | None = None,
) -> StatusResult:
    """Get recorded and declared packages for both categories."""
    result = StatusResult()
    try:
        config, provider = _open(config_path, provider)
    except (ConfigError, ReconcileError) as e:
        result.error = str(e)
        return result

    result.config = config
    for category in Category:
        result.recorded[category.label] = sorted(provider.recorded(category.label))
        result.declared[category.label] = sorted(
            d.coordinate for d in config.collection(category).dependencies
        )
    result.last_operation = provider.last_operation
    return result


def get_plan(
    config_path: Path | None = None,
    provider: DatastoreProvider | None = None,
) -> PlanResult:
    """Preview obsolete and incoming packages without changing anything."""
    result = PlanResult()
    try:
        config, provider = _open(config_path, provider)
    except (ConfigError, ReconcileError) as e:
        result.error = str(e)
        return result

    result.config = config
    result.plan = preview(
        provider,
        [config.collection(Category.FORMULA), config.collection(Category.CASK)],
    )
    return result
