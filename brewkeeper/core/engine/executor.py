"""
Apply executor — the convergence sequence.

Takes the declared formula and cask collections and drives brew until
the recorded state matches them. The stages always run in this order:

    init → uninstall formula → uninstall cask → update → upgrade
         → install formula → install cask → done

Obsolete packages are computed at the start of their uninstall stage,
before brew updates itself. Incoming packages are only computed after
update and upgrade, so new packages land in an up-to-date installation.

Everything is sequential and blocking. The first failure stops the
run; whatever already completed stays done and recorded, and the next
run picks up from the recorded state.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from brewkeeper.adapters.base import Adapter, ExecutionContext
from brewkeeper.core.engine.commands import CommandBuilder
from brewkeeper.core.engine.errors import (
    MalformedRecordError,
    ProcessExecutionError,
    ReconcileError,
)
from brewkeeper.core.engine.planner import incoming_deps, obsolete_names
from brewkeeper.core.models.action import Receipt
from brewkeeper.core.models.command import Command
from brewkeeper.core.models.dependency import Category, DependencyCollection
from brewkeeper.core.observability.events import EventSink, LoggingEventSink
from brewkeeper.core.providers.base import DatastoreProvider

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Run states, in execution order."""

    INIT = "init"
    UNINSTALL_FORMULA = "uninstall-formula"
    UNINSTALL_CASK = "uninstall-cask"
    UPDATE_SELF = "update-self"
    UPGRADE_ALL = "upgrade-all"
    INSTALL_FORMULA = "install-formula"
    INSTALL_CASK = "install-cask"
    DONE = "done"


@dataclass
class ApplyReport:
    """Result of an apply run (complete or aborted)."""

    operation_id: str = ""
    dry_run: bool = False
    stage: Stage = Stage.INIT
    started_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    ended_at: str = ""
    duration_ms: int = 0
    receipts: list[Receipt] = field(default_factory=list)
    removed: dict[str, list[str]] = field(default_factory=dict)
    installed: dict[str, list[str]] = field(default_factory=dict)
    error: ReconcileError | None = None

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def completed(self) -> bool:
        return self.stage is Stage.DONE and self.error is None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "failed"
        if self.dry_run:
            return "dry-run"
        return "ok"

    def count(self, changes: dict[str, list[str]]) -> int:
        return sum(len(v) for v in changes.values())

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "status": self.status,
            "stage": self.stage.value,
            "dry_run": self.dry_run,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "duration_ms": self.duration_ms,
            "total": self.total,
            "failed": self.failed,
            "removed": self.removed,
            "installed": self.installed,
            "error": self.error.to_dict() if self.error else None,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


class ApplyExecutor:
    """Runs one reconciliation against a provider and a brew adapter."""

    def __init__(
        self,
        provider: DatastoreProvider,
        adapter: Adapter,
        builder: CommandBuilder,
        sink: EventSink | None = None,
        *,
        timeout: int | None = None,
        dry_run: bool = False,
        operation_id: str | None = None,
    ):
        self._provider = provider
        self._adapter = adapter
        self._builder = builder
        self._sink = sink or LoggingEventSink(logger)
        self._timeout = timeout
        self._dry_run = dry_run
        self._operation_id = operation_id
        self._report = self._new_report()

    def _new_report(self) -> ApplyReport:
        # A fixed operation id is reused by every run; otherwise each run gets its own.
        return ApplyReport(
            operation_id=self._operation_id or generate_operation_id(),
            dry_run=self._dry_run,
        )

    @property
    def report(self) -> ApplyReport:
        """The report of the current (or last) run, also after a failure."""
        return self._report

    def run(
        self,
        formula: DependencyCollection,
        cask: DependencyCollection,
    ) -> ApplyReport:
        """Converge both categories to their declared collections.

        Raises:
            ReconcileError: On the first failure. ``self.report`` still
                describes everything that completed before it.
        """
        if formula.category is not Category.FORMULA or cask.category is not Category.CASK:
            raise ValueError("run() expects a formula collection and a cask collection")

        report = self._report = self._new_report()
        start = time.monotonic()
        self._sink.emit(
            "run:start",
            key=report.operation_id,
            data={"dry_run": self._dry_run, "brew": len(formula), "cask": len(cask)},
        )

        try:
            self._enter(Stage.INIT)
            self._provider.init()
            formula.transitive = False
            cask.transitive = False

            self._uninstall(Stage.UNINSTALL_FORMULA, formula)
            self._uninstall(Stage.UNINSTALL_CASK, cask)

            self._enter(Stage.UPDATE_SELF)
            logger.info("Updating brew itself")
            self._execute(self._builder.update_self())

            self._enter(Stage.UPGRADE_ALL)
            logger.info("Upgrading all installed brew packages")
            self._execute(self._builder.upgrade_all())

            self._install(Stage.INSTALL_FORMULA, formula)
            self._install(Stage.INSTALL_CASK, cask)

            self._enter(Stage.DONE)
        except ReconcileError as e:
            e.with_context(stage=report.stage.value)
            report.error = e
            self._finish(start)
            self._sink.emit("run:failed", key=report.operation_id, data=e.to_dict())
            raise

        self._finish(start)
        self._sink.emit(
            "run:done",
            key=report.operation_id,
            data={
                "removed": report.count(report.removed),
                "installed": report.count(report.installed),
                "commands": report.total,
            },
        )
        return report

    # ── Stages ───────────────────────────────────────────────────

    def _uninstall(self, stage: Stage, collection: DependencyCollection) -> None:
        category = collection.category
        self._enter(stage, category)

        obsolete = obsolete_names(self._provider, collection)
        if not obsolete:
            logger.debug("No obsolete %s packages", category.label)
            return

        logger.info("Uninstall the removed %s packages: %s", category.label, sorted(obsolete))
        for identifier in sorted(obsolete):
            try:
                command = self._builder.uninstall(identifier, category)
            except MalformedRecordError as e:
                raise e.with_context(stage=stage.value, category=category, package=identifier)

            self._execute(command)
            if not self._dry_run:
                self._record(lambda: self._provider.record_removed(identifier, category.label), command)
            self._report.removed.setdefault(category.label, []).append(command.package)

    def _install(self, stage: Stage, collection: DependencyCollection) -> None:
        category = collection.category
        self._enter(stage, category)

        incoming = incoming_deps(self._provider, collection)
        if not incoming:
            logger.debug("No incoming %s packages", category.label)
            return

        logger.info("Install the new %s packages: %s", category.label, sorted(d.name for d in incoming))
        for dependency in sorted(incoming, key=lambda d: d.name):
            command = self._builder.install(dependency)
            self._execute(command)
            if not self._dry_run:
                self._record(lambda: self._provider.record_installed(dependency), command)
            self._report.installed.setdefault(category.label, []).append(dependency.name)
            logger.info("Finished installing %s package: %s", category.label, dependency.name)

    # ── Helpers ──────────────────────────────────────────────────

    def _enter(self, stage: Stage, category: Category | None = None) -> None:
        self._report.stage = stage
        self._sink.emit(
            "stage:start",
            key=stage.value,
            data={"category": category.label if category else None},
        )

    def _execute(self, command: Command) -> Receipt:
        """Run one command to completion; raise if it failed."""
        stage = self._report.stage.value
        action_id = f"{self._report.operation_id}:{stage}:{command.package or command.operation.value}"
        context = ExecutionContext(
            action_id=action_id,
            command=command,
            timeout=self._timeout,
            dry_run=self._dry_run,
        )

        event_key = command.category.label if command.category else ""
        self._sink.emit("command:start", key=event_key, data={"command": command.display()})

        receipt = self._adapter.run(context)
        self._report.receipts.append(receipt)

        if receipt.failed:
            self._sink.emit(
                "command:failed",
                key=event_key,
                data={"command": command.display(), "error": receipt.error},
            )
            raise ProcessExecutionError(
                receipt,
                stage=stage,
                category=command.category,
                package=command.package,
            )

        self._sink.emit(
            "command:done",
            key=event_key,
            data={
                "command": command.display(),
                "status": receipt.status,
                "duration_ms": receipt.duration_ms,
            },
        )
        return receipt

    def _record(self, write, command: Command) -> None:
        try:
            write()
        except OSError as e:
            raise ReconcileError(
                f"brew succeeded but the datastore could not be updated: {e}",
                category=command.category,
                package=command.package,
            ) from e

    def _finish(self, start: float) -> None:
        self._report.ended_at = datetime.now(UTC).isoformat()
        self._report.duration_ms = int((time.monotonic() - start) * 1000)


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"
