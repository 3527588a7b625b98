"""
Provider factory — picks the datastore backend named in the config.

Selection is explicit by ``datastore.type``; there is no lookup by
runtime type.
"""

from __future__ import annotations

import logging

from brewkeeper.core.config.loader import ConfigError
from brewkeeper.core.models.settings import BrewkeeperConfig
from brewkeeper.core.persistence.state_file import default_state_path
from brewkeeper.core.providers.base import DatastoreProvider
from brewkeeper.core.providers.json_file import JsonFileProvider
from brewkeeper.core.providers.memory import InMemoryProvider

logger = logging.getLogger(__name__)


def create_provider(config: BrewkeeperConfig) -> DatastoreProvider:
    """Build the datastore provider for a configuration.

    Raises:
        ConfigError: If the datastore type is unknown.
    """
    kind = config.datastore.type

    if kind == "json":
        path = config.state_path or default_state_path(config.base_dir)
        logger.debug("Using JSON datastore at %s", path)
        return JsonFileProvider(path)

    if kind == "memory":
        logger.debug("Using in-memory datastore")
        return InMemoryProvider()

    raise ConfigError(f"Unknown datastore type: {kind!r}")
