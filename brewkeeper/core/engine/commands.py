"""
Command builder — turns (operation, category, package) into a brew call.

Every command runs the same binary (``<root>/bin/brew``) from the same
working directory (``<root>``); only the arguments differ:

    operation     formula              cask
    ──────────    ─────────────────    ──────────────────────
    update        update               update
    upgrade       upgrade              upgrade
    uninstall     uninstall <name>     cask uninstall <name>
    install       install <name>       cask install <name>
"""

from __future__ import annotations

from pathlib import Path

from brewkeeper.core.engine.errors import MalformedRecordError
from brewkeeper.core.models.command import Command, Operation
from brewkeeper.core.models.dependency import Category, Dependency

BREW_BINARY = Path("bin") / "brew"


def extract_package_name(identifier: str) -> str:
    """Name component of a recorded ``group:name:version`` identifier.

    Raises:
        MalformedRecordError: If the identifier does not have exactly
            three colon-delimited fields, or the name is empty.
    """
    parts = identifier.split(":")
    if len(parts) != 3 or not parts[1]:
        raise MalformedRecordError(identifier)
    return parts[1]


class CommandBuilder:
    """Builds immutable Commands for one Homebrew installation root."""

    def __init__(self, root: Path):
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    @property
    def binary(self) -> Path:
        return self._root / BREW_BINARY

    def build(
        self,
        operation: Operation,
        category: Category | None = None,
        package: str | None = None,
    ) -> Command:
        """Build the command for an operation.

        ``category`` is ignored for update/upgrade, which always apply
        to the whole installation.

        Raises:
            ValueError: If uninstall/install is missing a category or package.
        """
        if operation in (Operation.UPDATE_SELF, Operation.UPGRADE_ALL):
            args: tuple[str, ...] = (operation.value,)
            category = None
            package = None
        else:
            if category is None or not package:
                raise ValueError(f"'{operation.value}' needs a category and a package")
            prefix = ("cask",) if category is Category.CASK else ()
            args = (*prefix, operation.value, package)

        return Command(
            binary=str(self.binary),
            working_dir=str(self._root),
            args=args,
            operation=operation,
            category=category,
            package=package,
        )

    def update_self(self) -> Command:
        return self.build(Operation.UPDATE_SELF)

    def upgrade_all(self) -> Command:
        return self.build(Operation.UPGRADE_ALL)

    def uninstall(self, identifier: str, category: Category) -> Command:
        """Uninstall command for a recorded identifier."""
        return self.build(Operation.UNINSTALL, category, extract_package_name(identifier))

    def install(self, dependency: Dependency) -> Command:
        return self.build(Operation.INSTALL, dependency.category, dependency.name)
