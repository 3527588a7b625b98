"""
Dependency models — what the user declares should be installed.

A declared package belongs to exactly one category (formula or cask).
Identity for diffing is the (category, name) pair; the version is only
carried along so it shows up in the recorded identifier.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_VERSION = "latest"


class Category(str, Enum):
    """Package category. The value doubles as the datastore label."""

    FORMULA = "brew"
    CASK = "cask"

    @property
    def label(self) -> str:
        return self.value


class Dependency(BaseModel):
    """A single declared Homebrew package (immutable)."""

    model_config = ConfigDict(frozen=True)

    category: Category
    group: str
    name: str
    version: str = DEFAULT_VERSION

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not v or ":" in v:
            raise ValueError(f"Invalid package name: {v!r}")
        return v

    @property
    def key(self) -> tuple[Category, str]:
        """Identity used when diffing declared against recorded sets."""
        return (self.category, self.name)

    @property
    def coordinate(self) -> str:
        """Recorded identifier, ``group:name:version``."""
        return f"{self.group}:{self.name}:{self.version}"

    @classmethod
    def parse(cls, notation: str, category: Category) -> Dependency:
        """Parse ``name``, ``group:name`` or ``group:name:version``.

        The group defaults to the category label, the version to ``latest``.

        Raises:
            ValueError: If the notation has more than three fields or
                an empty name.
        """
        parts = notation.strip().split(":")
        if len(parts) == 1:
            group, name, version = category.label, parts[0], DEFAULT_VERSION
        elif len(parts) == 2:
            group, name, version = parts[0], parts[1], DEFAULT_VERSION
        elif len(parts) == 3:
            group, name, version = parts
        else:
            raise ValueError(f"Invalid dependency notation: {notation!r}")

        return cls(
            category=category,
            group=group or category.label,
            name=name,
            version=version or DEFAULT_VERSION,
        )

    def __str__(self) -> str:
        return self.coordinate


class DependencyCollection(BaseModel):
    """A named set of declared dependencies for one category.

    ``transitive`` mirrors the build-tool toggle: collections start out
    transitive and the executor switches it off before diffing, since
    only the declared packages themselves are reconciled.
    """

    category: Category
    dependencies: frozenset[Dependency] = Field(default_factory=frozenset)
    transitive: bool = True

    @property
    def label(self) -> str:
        return self.category.label

    @classmethod
    def from_notations(
        cls,
        category: Category,
        notations: list[str],
    ) -> DependencyCollection:
        """Build a collection from declaration strings.

        Repeating a declaration is harmless, but one name declared with
        two different coordinates is rejected: packages are identified by
        name, so both would be installed and either could be recorded.
        """
        by_name: dict[str, Dependency] = {}
        for notation in notations:
            dep = Dependency.parse(notation, category)
            seen = by_name.setdefault(dep.name, dep)
            if seen != dep:
                raise ValueError(
                    f"'{dep.name}' is declared twice in {category.label}: "
                    f"{seen.coordinate} and {dep.coordinate}"
                )
        return cls(category=category, dependencies=frozenset(by_name.values()))

    def __len__(self) -> int:
        return len(self.dependencies)
