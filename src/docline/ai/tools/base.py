"""Base classes for document tools.

This module provides abstract base classes that standardize tool interfaces,
error handling, and telemetry integration across all document tools.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Protocol

from ...documents.model import Document
from .errors import ErrorCode, ToolError


LOGGER = logging.getLogger(__name__)


class TelemetryEmitter(Protocol):
    """Protocol for emitting telemetry events."""

    def emit(self, event_name: str, payload: Mapping[str, Any]) -> None:
        """Emit a telemetry event with the given payload."""
        ...


@dataclass(slots=True)
class ToolResult:
    """Standardized result container for tool execution.

    Attributes:
        success: Whether the tool completed successfully.
        data: The result data if successful.
        error: Error details if unsuccessful.
        duration_ms: Execution time in milliseconds.
        metadata: Additional metadata about the execution.
    """

    success: bool
    data: dict[str, Any] | None = None
    error: ToolError | None = None
    duration_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result for JSON responses."""
        if self.success:
            result = dict(self.data) if self.data else {}
        else:
            result = self.error.to_dict() if self.error else {"error": "unknown", "message": "Unknown error"}
        if self.metadata:
            result["_metadata"] = dict(self.metadata)
        return result


@dataclass(slots=True)
class ToolContext:
    """Runtime context provided to tool execution.

    The context holds the request's document exclusively for the duration
    of one dispatch sequence; tools must not keep a reference past the call.

    Attributes:
        document: The line store the tool operates on.
        telemetry: Optional telemetry emitter.
        request_id: Unique identifier for this request (for tracing).
    """

    document: Document
    telemetry: TelemetryEmitter | None = None
    request_id: str | None = None


class BaseTool(ABC):
    """Abstract base class for all document tools.

    Provides standardized execution flow with:
    - Automatic timing and telemetry
    - Consistent error handling
    - Input validation hooks

    Subclasses must implement:
    - `name`: Tool identifier
    - `execute()`: Core tool logic
    - `to_payload()`: Conversion of a `ToolResult` into the wire envelope
    """

    name: ClassVar[str] = ""

    def run(
        self,
        context: ToolContext,
        params: Mapping[str, Any] | None = None,
    ) -> ToolResult:
        """Execute the tool with standardized error handling and telemetry.

        Never raises: expected failures surface as ``ToolError`` results and
        unexpected ones are logged and wrapped as ``internal_error``.
        """
        start_time = time.perf_counter()
        params = dict(params) if params else {}

        try:
            self.validate(params)
            result_data = self.execute(context, params)
            result = ToolResult(
                success=True,
                data=result_data,
                duration_ms=(time.perf_counter() - start_time) * 1000.0,
            )

        except ToolError as exc:
            result = ToolResult(
                success=False,
                error=exc,
                duration_ms=(time.perf_counter() - start_time) * 1000.0,
            )

        except Exception as exc:
            LOGGER.exception("Tool %s failed unexpectedly", self.name)
            result = ToolResult(
                success=False,
                error=ToolError(
                    error_code=ErrorCode.INTERNAL_ERROR,
                    message=f"Internal error: {exc}",
                ),
                duration_ms=(time.perf_counter() - start_time) * 1000.0,
            )

        self._emit_telemetry(context, result)
        return result

    @abstractmethod
    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        """Execute the tool's core logic.

        Raises:
            ToolError: For expected error conditions.
        """
        ...

    def validate(self, params: dict[str, Any]) -> None:
        """Validate tool parameters before execution.

        Override to add custom validation. Raise ToolError for invalid inputs.
        """
        pass

    @abstractmethod
    def to_payload(self, result: ToolResult) -> Any:
        """Convert a result into the tool's JSON envelope."""
        ...

    def _emit_telemetry(self, context: ToolContext, result: ToolResult) -> None:
        """Emit telemetry event for this tool execution."""
        if context.telemetry is None:
            return

        payload: dict[str, Any] = {
            "tool": self.name,
            "success": result.success,
            "duration_ms": round(result.duration_ms, 3),
            "document_id": context.document.id,
        }
        if context.request_id:
            payload["request_id"] = context.request_id
        if not result.success and result.error:
            payload["error_code"] = result.error.error_code
            payload["error_message"] = result.error.message

        try:
            context.telemetry.emit(f"tool.{self.name}", payload)
        except Exception:
            LOGGER.debug("Failed to emit telemetry for tool %s", self.name, exc_info=True)


class ReadOnlyTool(BaseTool):
    """Base class for tools that read document state without modifications."""

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        return self.read(context.document, params)

    @abstractmethod
    def read(self, document: Document, params: dict[str, Any]) -> dict[str, Any]:
        """Perform the read operation."""
        ...


class WriteTool(BaseTool):
    """Base class for tools that modify document content.

    Write tools:
    - Perform all validation before touching the document
    - Restore the pre-call state if `write()` fails part way through
    - Verify the numbering invariants after every successful write
    """

    def execute(self, context: ToolContext, params: dict[str, Any]) -> dict[str, Any]:
        document = context.document
        snapshot = document.copy()
        try:
            result = self.write(document, params)
            document.check_invariants()
        except ToolError:
            _restore(document, snapshot)
            raise
        except Exception:
            _restore(document, snapshot)
            LOGGER.warning("Rolled back document %s after a failed %s", document.id, self.name)
            raise
        return result

    @abstractmethod
    def write(self, document: Document, params: dict[str, Any]) -> dict[str, Any]:
        """Perform the write operation.

        Raises:
            ToolError: For write-related errors. Must be raised before the
                document is mutated.
        """
        ...


def _restore(document: Document, snapshot: Document) -> None:
    document.lines = snapshot.lines
    document.metadata = snapshot.metadata


__all__ = [
    "BaseTool",
    "ReadOnlyTool",
    "WriteTool",
    "ToolResult",
    "ToolContext",
    "TelemetryEmitter",
]
