"""Service layer helpers (settings, telemetry)."""

from .settings import Settings, SettingsStore
from .telemetry import InMemoryTelemetrySink, ToolTelemetryEvent

__all__ = ["InMemoryTelemetrySink", "Settings", "SettingsStore", "ToolTelemetryEvent"]
