"""Tool telemetry collection."""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Mapping

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ToolTelemetryEvent:
    """A single ``tool.<name>`` event emitted by a document tool."""

    name: str
    tool: str
    success: bool
    duration_ms: float
    document_id: str | None = None
    request_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def from_payload(cls, event_name: str, payload: Mapping[str, Any]) -> ToolTelemetryEvent:
        return cls(
            name=event_name,
            tool=str(payload.get("tool", event_name.removeprefix("tool."))),
            success=bool(payload.get("success", False)),
            duration_ms=float(payload.get("duration_ms", 0.0)),
            document_id=payload.get("document_id"),
            request_id=payload.get("request_id"),
            error_code=payload.get("error_code"),
            error_message=payload.get("error_message"),
        )


class InMemoryTelemetrySink:
    """Ring-buffer sink behind the CLI ``--telemetry`` summary.

    Implements the ``emit`` hook expected on ``ToolContext.telemetry``.
    """

    def __init__(self, capacity: int = 200) -> None:
        self._capacity = max(10, capacity)
        self._buffer: deque[ToolTelemetryEvent] = deque(maxlen=self._capacity)
        self._lock = Lock()

    def emit(self, event_name: str, payload: Mapping[str, Any]) -> None:
        event = ToolTelemetryEvent.from_payload(event_name, payload)
        with self._lock:
            self._buffer.append(event)
        LOGGER.debug("Telemetry %s success=%s %.2fms", event_name, event.success, event.duration_ms)

    def tail(self, limit: int | None = None) -> list[ToolTelemetryEvent]:
        with self._lock:
            events = list(self._buffer)
        if limit is None or limit >= len(events):
            return events
        return events[-limit:]

    def failures(self) -> list[ToolTelemetryEvent]:
        return [event for event in self.tail() if not event.success]

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)


__all__ = ["InMemoryTelemetrySink", "ToolTelemetryEvent"]
