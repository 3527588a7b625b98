"""
Tests for persistence — state file and audit ledger.
"""

import json
import time
from pathlib import Path

import pytest

from brewkeeper.core.models.state import InstalledState
from brewkeeper.core.persistence.audit import AuditEntry, AuditWriter
from brewkeeper.core.persistence.state_file import (
    StateFileError,
    default_state_path,
    load_state,
    save_state,
)


class TestStateFile:
    """Tests for state file persistence."""

    def test_save_and_load(self, tmp_path: Path):
        """State roundtrips through save/load."""
        path = tmp_path / ".state" / "installed.json"
        state = InstalledState()
        state.add("brew", "brew:git:latest")
        state.last_operation.operation_id = "op-1"

        save_state(state, path)
        loaded = load_state(path)

        assert loaded.recorded("brew") == {"brew:git:latest"}
        assert loaded.last_operation.operation_id == "op-1"

    def test_load_missing_returns_fresh(self, tmp_path: Path):
        state = load_state(tmp_path / "nonexistent.json")
        assert state.dependencies == {}

    def test_load_corrupt_raises(self, tmp_path: Path):
        """Corrupt JSON is an error, not a fresh start."""
        path = tmp_path / "corrupt.json"
        path.write_text("not json at all {{{")
        with pytest.raises(StateFileError):
            load_state(path)

    def test_save_creates_directories(self, tmp_path: Path):
        path = tmp_path / "deep" / "nested" / "state.json"
        save_state(InstalledState(), path)
        assert path.is_file()

    def test_save_is_valid_json(self, tmp_path: Path):
        path = tmp_path / "state.json"
        save_state(InstalledState(), path)
        data = json.loads(path.read_text())
        assert data["schema_version"] == 1

    def test_save_atomic_no_partial(self, tmp_path: Path):
        """No temp files are left behind."""
        path = tmp_path / "state.json"
        save_state(InstalledState(), path)
        save_state(InstalledState(), path)
        assert list(tmp_path.glob(".state_*.tmp")) == []

    def test_save_updates_timestamp(self, tmp_path: Path):
        path = tmp_path / "state.json"
        state = InstalledState()
        old_ts = state.updated_at
        time.sleep(0.01)
        save_state(state, path)
        assert state.updated_at != old_ts

    def test_default_path(self, tmp_path: Path):
        assert default_state_path(tmp_path) == tmp_path / ".state" / "installed.json"


class TestAuditWriter:
    """Tests for the append-only audit ledger."""

    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(root=tmp_path)
        writer.write(AuditEntry(operation_id="op-1", status="ok", installed={"brew": ["wget"]}))
        writer.write(AuditEntry(operation_id="op-2", status="failed", errors=["boom"]))

        entries = writer.read_all()
        assert [e.operation_id for e in entries] == ["op-1", "op-2"]
        assert entries[0].installed == {"brew": ["wget"]}
        assert entries[1].errors == ["boom"]
        assert writer.path == tmp_path / ".state" / "audit.ndjson"

    def test_read_missing(self, tmp_path: Path):
        assert AuditWriter(tmp_path / "none.ndjson").read_all() == []

    def test_skips_corrupt_lines(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(operation_id="op-1"))
        with path.open("a") as f:
            f.write("garbage\n\n")
        writer.write(AuditEntry(operation_id="op-2"))

        assert [e.operation_id for e in writer.read_all()] == ["op-1", "op-2"]

    def test_read_recent(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        for i in range(5):
            writer.write(AuditEntry(operation_id=f"op-{i}"))
        assert [e.operation_id for e in writer.read_recent(2)] == ["op-3", "op-4"]
