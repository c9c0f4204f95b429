"""Standardized error types for document tools.

Errors are raised inside tool implementations and converted into result
envelopes at the tool boundary, so no exception crosses into callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence


# -----------------------------------------------------------------------------
# Error Code Constants
# -----------------------------------------------------------------------------

class ErrorCode:
    """Constants for error codes used in tool responses."""

    VALIDATION_ERROR = "validation_error"
    LINE_LOCKED = "line_locked"
    UNKNOWN_OPERATION = "unknown_operation"
    UNKNOWN_TOOL = "unknown_tool"
    INTERNAL_ERROR = "internal_error"


# -----------------------------------------------------------------------------
# Base Error Class
# -----------------------------------------------------------------------------

@dataclass
class ToolError(Exception):
    """Base exception class for all tool errors.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
        suggestion: Actionable guidance for recovery.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    severity: ClassVar[str] = "error"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON tool responses."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        if self.suggestion:
            result["suggestion"] = self.suggestion
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# -----------------------------------------------------------------------------
# Validation Errors
# -----------------------------------------------------------------------------

@dataclass
class ValidationError(ToolError):
    """Error raised when tool arguments are missing or malformed."""

    error_code: str = field(default=ErrorCode.VALIDATION_ERROR)
    message: str = field(default="Invalid tool arguments")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Check the tool parameters and retry")


@dataclass
class MissingParameterError(ValidationError):
    """Error raised when a required parameter is missing."""

    message: str = field(default="Required parameter is missing")
    suggestion: str = field(default="Provide the required parameter")

    parameter: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.parameter is not None:
            result["parameter"] = self.parameter
        return result


@dataclass
class ContentRequiredError(ValidationError):
    """Error raised when an edit needs ``newText`` but none was given."""

    message: str = field(default="New text is required for this operation")
    suggestion: str = field(default="Pass newText (an empty string is allowed)")

    operation: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.operation is not None:
            result["operation"] = self.operation
        return result


@dataclass
class InvalidParameterError(ValidationError):
    """Error raised when a parameter value has the wrong shape."""

    message: str = field(default="Invalid parameter value")
    suggestion: str = field(default="Check the parameter requirements")

    parameter: str | None = field(default=None)
    value: Any = field(default=None)
    expected: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.parameter is not None:
            result["parameter"] = self.parameter
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.expected is not None:
            result["expected"] = self.expected
        return result


# -----------------------------------------------------------------------------
# Edit Errors
# -----------------------------------------------------------------------------

@dataclass
class LineLockedError(ToolError):
    """Error raised when an edit batch targets one or more locked lines.

    The whole batch is rejected; nothing is applied.
    """

    error_code: str = field(default=ErrorCode.LINE_LOCKED)
    message: str = field(default="Cannot edit locked lines")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Remove locked lines from the request or ask the user to unlock them")

    locked_lines: Sequence[int] = field(default_factory=tuple)

    @classmethod
    def for_lines(cls, locked_lines: Sequence[int]) -> LineLockedError:
        numbers = tuple(locked_lines)
        return cls(
            message=f"Cannot edit locked lines: {', '.join(str(n) for n in numbers)}",
            locked_lines=numbers,
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["locked_lines"] = list(self.locked_lines)
        return result


@dataclass
class UnknownOperationError(ToolError):
    """Error raised for an edit operation outside replace/insert/delete."""

    error_code: str = field(default=ErrorCode.UNKNOWN_OPERATION)
    message: str = field(default="Unknown edit operation")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Use one of: replace, insert, delete")

    operation: Any = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.operation is not None:
            result["operation"] = str(self.operation)
        return result


@dataclass
class UnknownToolError(ToolError):
    """Error raised when a tool call names a tool that is not registered."""

    error_code: str = field(default=ErrorCode.UNKNOWN_TOOL)
    message: str = field(default="Unknown tool")
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = field(default="Use doc_search, doc_read, or doc_edit")

    tool_name: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.tool_name is not None:
            result["tool_name"] = self.tool_name
        return result



__all__ = [
    "ErrorCode",
    "ToolError",
    "ValidationError",
    "MissingParameterError",
    "ContentRequiredError",
    "InvalidParameterError",
    "LineLockedError",
    "UnknownOperationError",
    "UnknownToolError",
]
