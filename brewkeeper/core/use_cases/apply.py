"""
Apply use case — converge the host to brewkeeper.yml.

This is the top-level orchestrator: it loads config, opens the
datastore, builds the executor, runs it, and records the outcome in
the state file and the audit ledger. Errors come back in the result,
never as exceptions, so every entry point reports them the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from brewkeeper.adapters.base import Adapter
from brewkeeper.adapters.mock import MockAdapter
from brewkeeper.adapters.shell.command import BrewCommandAdapter
from brewkeeper.core.config.loader import ConfigError, load_config
from brewkeeper.core.engine.commands import CommandBuilder
from brewkeeper.core.engine.errors import ProviderInitError, ReconcileError
from brewkeeper.core.engine.executor import ApplyExecutor, ApplyReport
from brewkeeper.core.models.dependency import Category
from brewkeeper.core.models.settings import BrewkeeperConfig
from brewkeeper.core.models.state import OperationRecord
from brewkeeper.core.observability.events import EventSink
from brewkeeper.core.persistence.audit import AuditEntry, AuditWriter
from brewkeeper.core.providers.base import DatastoreProvider
from brewkeeper.core.providers.factory import create_provider
from brewkeeper.core.providers.memory import InMemoryProvider

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of an apply run."""

    report: ApplyReport | None = None
    config: BrewkeeperConfig | None = None
    failure: ReconcileError | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.failure:
            result["failure"] = self.failure.to_dict()
        if self.config:
            result["homebrew_root"] = str(self.config.homebrew_root)
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def _scratch_copy(provider: DatastoreProvider) -> InMemoryProvider:
    """In-memory copy of a provider's records, for mock runs."""
    provider.init()
    return InMemoryProvider({c.label: provider.recorded(c.label) for c in Category})


def run_apply(
    config_path: Path | None = None,
    dry_run: bool = False,
    mock_mode: bool = False,
    adapter: Adapter | None = None,
    provider: DatastoreProvider | None = None,
    sink: EventSink | None = None,
) -> ApplyResult:
    """Uninstall obsolete, update brew, install incoming packages.

    Args:
        config_path: Optional explicit path to brewkeeper.yml.
        dry_run: Build and log commands without running them.
        mock_mode: Run against a mock adapter and a scratch copy of the
            recorded state; nothing on disk changes except the audit log.
        adapter: Optional pre-built adapter (overrides mock_mode).
        provider: Optional pre-built datastore provider.
        sink: Optional event sink for progress events.

    Returns:
        ApplyResult with the execution report.
    """
    result = ApplyResult()

    # ── Load config ──────────────────────────────────────────────
    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.config = config

    builder = CommandBuilder(config.homebrew_root)

    # ── Datastore ────────────────────────────────────────────────
    try:
        if provider is None:
            provider = create_provider(config)
        if mock_mode:
            provider = _scratch_copy(provider)
    except (ConfigError, ReconcileError) as e:
        result.error = str(e)
        return result

    # ── Adapter ──────────────────────────────────────────────────
    if adapter is None:
        adapter = MockAdapter() if mock_mode else BrewCommandAdapter(builder.binary)

    # ── Execute ──────────────────────────────────────────────────
    executor = ApplyExecutor(
        provider,
        adapter,
        builder,
        sink,
        timeout=config.homebrew.timeout,
        dry_run=dry_run,
    )
    try:
        executor.run(
            config.collection(Category.FORMULA),
            config.collection(Category.CASK),
        )
    except ReconcileError as e:
        logger.error("Apply failed: %s", e)
        result.failure = e
        result.error = str(e)

    report = executor.report
    result.report = report

    # ── Persist ──────────────────────────────────────────────────
    if not dry_run and not isinstance(result.failure, ProviderInitError):
        try:
            provider.record_operation(
                OperationRecord(
                    operation_id=report.operation_id,
                    started_at=report.started_at,
                    ended_at=report.ended_at,
                    status=report.status,
                    stage=report.stage.value,
                    removed=report.count(report.removed),
                    installed=report.count(report.installed),
                    error=result.error,
                )
            )
        except OSError as e:
            logger.error("Could not record the apply outcome in %s: %s", provider.name, e)
            if result.error is None:
                result.error = f"Could not record the apply outcome: {e}"

    AuditWriter(root=config.base_dir).write(
        AuditEntry(
            operation_id=report.operation_id,
            status=report.status,
            stage=report.stage.value,
            commands_total=report.total,
            commands_failed=report.failed,
            duration_ms=report.duration_ms,
            removed=report.removed,
            installed=report.installed,
            errors=[result.error] if result.error else [],
            context={"dry_run": dry_run, "mock": mock_mode, "adapter": adapter.name},
        )
    )

    return result
