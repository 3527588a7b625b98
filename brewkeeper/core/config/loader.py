"""
Configuration loader — reads brewkeeper.yml into domain models.

Reads YAML, validates against Pydantic schemas, and returns a typed
BrewkeeperConfig. Declared dependency notations are checked here so a
typo fails before brew is ever invoked.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from brewkeeper.core.models.dependency import Category
from brewkeeper.core.models.settings import BrewkeeperConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "brewkeeper.yml"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for brewkeeper.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to brewkeeper.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> BrewkeeperConfig:
    """Load and validate configuration.

    Args:
        path: Explicit path to brewkeeper.yml. If None, searches upward.

    Returns:
        Validated BrewkeeperConfig.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Create one, or specify --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Empty "brew:" / "cask:" keys parse as None
    for key in ("brew", "cask"):
        if data.get(key) is None:
            data[key] = []

    data["base_dir"] = path.parent.resolve()

    try:
        config = BrewkeeperConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    # Parse every declaration now so bad notations surface as config errors
    for category in Category:
        try:
            config.collection(category)
        except (ValueError, ValidationError) as e:
            raise ConfigError(f"Invalid {category.label} dependency: {e}") from e

    logger.info(
        "Loaded config with %d brew and %d cask packages",
        len(config.brew),
        len(config.cask),
    )
    return config
