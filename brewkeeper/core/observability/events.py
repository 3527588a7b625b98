"""
Event sinks — structured progress events from an apply run.

The executor does not log progress through a global; it is handed a
sink and emits events into it. Every event uses the same envelope::

    {
        "v": 1,                     # schema version
        "ts": 1739648400.123,       # emit timestamp
        "seq": 47,                  # monotonic per sink
        "type": "command:done",     # <domain>:<action>
        "key": "brew",              # category label, stage, or ""
        "data": { ... },            # event-specific payload
    }
"""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_SCHEMA_VERSION = 1


class EventSink(Protocol):
    def emit(
        self,
        event_type: str,
        *,
        key: str = "",
        data: dict[str, Any] | None = None,
    ) -> dict: ...


class _BaseSink:
    def __init__(self) -> None:
        self._seq = 0

    def _envelope(self, event_type: str, key: str, data: dict[str, Any] | None) -> dict:
        self._seq += 1
        return {
            "v": _SCHEMA_VERSION,
            "ts": time.time(),
            "seq": self._seq,
            "type": event_type,
            "key": key,
            "data": data or {},
        }


class LoggingEventSink(_BaseSink):
    """Writes each event to a logger. Failures go out at ERROR."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        super().__init__()
        self._log = log or logger

    def emit(
        self,
        event_type: str,
        *,
        key: str = "",
        data: dict[str, Any] | None = None,
    ) -> dict:
        event = self._envelope(event_type, key, data)
        level = logging.ERROR if event_type.endswith(":failed") else logging.INFO
        self._log.log(level, "%s [%s] %s", event_type, key or "-", event["data"])
        return event


class RecordingEventSink(_BaseSink):
    """Keeps every event in memory, for tests and --json output."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[dict] = []

    def emit(
        self,
        event_type: str,
        *,
        key: str = "",
        data: dict[str, Any] | None = None,
    ) -> dict:
        event = self._envelope(event_type, key, data)
        self.events.append(event)
        return event

    def types(self) -> list[str]:
        return [e["type"] for e in self.events]

    def of_type(self, event_type: str) -> list[dict]:
        return [e for e in self.events if e["type"] == event_type]
