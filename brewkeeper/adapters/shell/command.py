"""
Brew command adapter — run one brew invocation as a subprocess.

Commands are executed without a shell, from an argument vector, in
the Homebrew installation root. The call blocks until brew exits;
its output is logged line by line as it arrives (visible with --verbose)
and kept on the receipt.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
import time
from pathlib import Path
from typing import IO

from brewkeeper.adapters.base import Adapter, ExecutionContext
from brewkeeper.core.models.action import Receipt

logger = logging.getLogger(__name__)


class BrewCommandAdapter(Adapter):
    """Execute brew commands and capture their output."""

    def __init__(self, binary: Path | None = None):
        self._binary = binary

    @property
    def name(self) -> str:
        return "brew"

    def is_available(self) -> bool:
        if self._binary is None:
            return False
        return self._binary.is_file() and os.access(self._binary, os.X_OK)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        cwd = context.working_dir
        if not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        binary = Path(context.command.binary)
        if not context.dry_run and not binary.is_file():
            return False, f"brew binary not found: {binary}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        argv = context.command.argv
        cwd = context.working_dir
        timeout = context.timeout

        logger.debug("Executing: %s (cwd=%s)", " ".join(argv), cwd)
        start = time.monotonic()

        try:
            proc = subprocess.Popen(
                argv,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action_id,
                error=f"Command could not be started: {e}",
                metadata={"argv": argv},
            )

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []
        pumps = [
            threading.Thread(target=_pump, args=(proc.stdout, stdout_lines, logging.INFO), daemon=True),
            threading.Thread(target=_pump, args=(proc.stderr, stderr_lines, logging.WARNING), daemon=True),
        ]
        for pump in pumps:
            pump.start()

        try:
            return_code = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
            for pump in pumps:
                pump.join()
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action_id,
                error=f"Command timed out after {timeout}s",
                metadata={"argv": argv, "timeout": timeout},
            )

        for pump in pumps:
            pump.join()

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = "\n".join(stdout_lines).strip()
        stderr = "\n".join(stderr_lines).strip()

        if return_code == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action_id,
                output=output,
                duration_ms=elapsed_ms,
                metadata={
                    "argv": argv,
                    "return_code": return_code,
                    "stderr": stderr,
                },
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action_id,
            error=stderr or f"Command exited with code {return_code}",
            duration_ms=elapsed_ms,
            metadata={
                "argv": argv,
                "return_code": return_code,
                "stdout": output,
            },
        )


def _pump(stream: IO[str] | None, lines: list[str], level: int) -> None:
    """Forward a child stream to the log line by line while keeping a copy."""
    if stream is None:
        return
    with stream:
        for line in stream:
            line = line.rstrip("\n")
            lines.append(line)
            logger.log(level, "[brew] %s", line)
