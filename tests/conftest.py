"""
Shared test fixtures and configuration.
"""

import stat
import textwrap
from pathlib import Path

import pytest

from brewkeeper.adapters.mock import MockAdapter
from brewkeeper.core.engine.commands import CommandBuilder
from brewkeeper.core.observability.events import RecordingEventSink

FAKE_BREW = """\
#!/bin/sh
echo "$*" >> "$(dirname "$0")/../calls.log"
case "$*" in
  *fail-me*) echo "Error: No available formula" >&2; exit 1 ;;
esac
echo "ok $*"
"""


@pytest.fixture
def brew_root(tmp_path: Path) -> Path:
    """A Homebrew root whose bin/brew logs its arguments to calls.log."""
    root = tmp_path / "homebrew"
    (root / "bin").mkdir(parents=True)
    brew = root / "bin" / "brew"
    brew.write_text(FAKE_BREW)
    brew.chmod(brew.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return root


@pytest.fixture
def brew_calls(brew_root: Path):
    """Read back the argument lines the fake brew received."""

    def _calls() -> list[str]:
        log = brew_root / "calls.log"
        if not log.is_file():
            return []
        return log.read_text().splitlines()

    return _calls


@pytest.fixture
def write_config(tmp_path: Path, brew_root: Path):
    """Write a brewkeeper.yml into tmp_path and return its path."""

    def _write(brew: list[str] | None = None, cask: list[str] | None = None, extra: str = "") -> Path:
        lines = [
            "homebrew:",
            f"  root: {brew_root}",
            "datastore:",
            "  type: json",
            "brew:",
            *[f"  - {b}" for b in (brew or [])],
            "cask:",
            *[f"  - {c}" for c in (cask or [])],
        ]
        config = tmp_path / "brewkeeper.yml"
        config.write_text("\n".join(lines) + "\n" + textwrap.dedent(extra))
        return config

    return _write


@pytest.fixture
def builder() -> CommandBuilder:
    return CommandBuilder(Path("/opt/homebrew"))


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()
