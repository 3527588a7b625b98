"""
State file persistence — atomic read/write for InstalledState.

State is stored as JSON in .state/installed.json. Writes are atomic
(write to temp file, then rename) to prevent corruption if the
process crashes mid-write.

Unlike a cache, the recorded state decides what gets uninstalled, so
a corrupt file is an error rather than a reason to start fresh.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from brewkeeper.core.models.state import InstalledState

logger = logging.getLogger(__name__)

# Default state file path (relative to the config directory)
DEFAULT_STATE_DIR = ".state"
DEFAULT_STATE_FILE = "installed.json"


class StateFileError(Exception):
    """Raised when an existing state file cannot be read or parsed."""


def default_state_path(root: Path) -> Path:
    """Get the default state file path under a directory."""
    return root / DEFAULT_STATE_DIR / DEFAULT_STATE_FILE


def load_state(path: Path) -> InstalledState:
    """Load recorded state from a JSON file.

    Args:
        path: Path to the state JSON file.

    Returns:
        InstalledState model. If the file doesn't exist, returns a fresh state.

    Raises:
        StateFileError: If the file exists but is unreadable or invalid.
    """
    if not path.is_file():
        logger.info("No state file at %s — starting fresh", path)
        return InstalledState()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StateFileError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(raw)
        state = InstalledState.model_validate(data)
    except json.JSONDecodeError as e:
        raise StateFileError(f"Corrupt state file {path}: {e}") from e
    except ValidationError as e:
        raise StateFileError(f"Invalid state file {path}: {e}") from e

    logger.debug("Loaded state from %s (updated_at=%s)", path, state.updated_at)
    return state


def save_state(state: InstalledState, path: Path) -> None:
    """Save recorded state to a JSON file (atomic write).

    Args:
        state: The state to save.
        path: Target path for the state file.
    """
    state.touch()

    path.parent.mkdir(parents=True, exist_ok=True)

    data = state.model_dump(mode="json")
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    # Atomic write: temp file in same directory, then rename
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".state_",
            suffix=".tmp",
        )
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
            logger.debug("State saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save state to %s: %s", path, e)
        raise
