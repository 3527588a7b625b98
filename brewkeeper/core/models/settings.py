"""
Settings model — the contents of brewkeeper.yml.

Declares where Homebrew lives, which datastore records installed
packages, and the formula and cask packages that should be installed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from brewkeeper.core.models.dependency import Category, DependencyCollection


class HomebrewSettings(BaseModel):
    """Location of the Homebrew installation."""

    root: Path
    timeout: int | None = None  # seconds per brew invocation


class DatastoreSettings(BaseModel):
    """Which backend records the installed packages."""

    type: Literal["json", "memory"] = "json"
    path: Path | None = None  # json only; default .state/installed.json


class BrewkeeperConfig(BaseModel):
    """Root configuration — loaded from brewkeeper.yml."""

    homebrew: HomebrewSettings
    datastore: DatastoreSettings = Field(default_factory=DatastoreSettings)

    brew: list[str] = Field(default_factory=list)
    cask: list[str] = Field(default_factory=list)

    # Directory the config file was loaded from; relative paths resolve here
    base_dir: Path = Field(default_factory=Path.cwd)

    def collection(self, category: Category) -> DependencyCollection:
        """Declared dependencies for one category (fresh, transitive on)."""
        notations = self.brew if category is Category.FORMULA else self.cask
        return DependencyCollection.from_notations(category, notations)

    @property
    def homebrew_root(self) -> Path:
        return self._resolve(self.homebrew.root)

    @property
    def state_path(self) -> Path | None:
        if self.datastore.path is None:
            return None
        return self._resolve(self.datastore.path)

    def _resolve(self, path: Path) -> Path:
        path = path.expanduser()
        if not path.is_absolute():
            path = self.base_dir / path
        return path
