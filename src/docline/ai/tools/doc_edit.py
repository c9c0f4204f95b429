"""Batch line edits (``doc_edit``).

This is the only code path that mutates a line store. Arguments are parsed
into one of three command variants before anything is touched, locked
targets abort the whole batch, and the store is renumbered contiguously
after every structural change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping, Sequence, Union

from ...documents.model import Document
from .base import ToolResult, WriteTool
from .errors import (
    ContentRequiredError,
    InvalidParameterError,
    LineLockedError,
    MissingParameterError,
    UnknownOperationError,
)
from .validation import coerce_line_numbers

LOGGER = logging.getLogger(__name__)


class EditOperation(str, Enum):
    """Supported edit kinds."""

    REPLACE = "replace"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(slots=True, frozen=True)
class ReplaceCommand:
    """Set every targeted line's text to ``text``."""

    lines: tuple[int, ...]
    text: str

    operation: ClassVar[EditOperation] = EditOperation.REPLACE


@dataclass(slots=True, frozen=True)
class InsertCommand:
    """Splice a new line holding ``text`` after each targeted line."""

    lines: tuple[int, ...]
    text: str

    operation: ClassVar[EditOperation] = EditOperation.INSERT


@dataclass(slots=True, frozen=True)
class DeleteCommand:
    """Remove every targeted line."""

    lines: tuple[int, ...]

    operation: ClassVar[EditOperation] = EditOperation.DELETE


EditCommand = Union[ReplaceCommand, InsertCommand, DeleteCommand]


def parse_edit_command(arguments: Mapping[str, Any]) -> EditCommand:
    """Turn loosely typed tool arguments into an ``EditCommand``.

    Raises:
        MissingParameterError: ``lines`` or ``operation`` is absent or empty.
        InvalidParameterError: line numbers or ``newText`` have the wrong type.
        UnknownOperationError: ``operation`` is not replace/insert/delete.
        ContentRequiredError: replace/insert without ``newText``.
    """

    lines = tuple(coerce_line_numbers(arguments.get("lines")))

    raw_operation = arguments.get("operation")
    if raw_operation is None:
        raise MissingParameterError(
            message="Parameter 'operation' is required",
            parameter="operation",
        )
    try:
        operation = EditOperation(raw_operation)
    except ValueError:
        raise UnknownOperationError(
            message=f"Unknown operation: {raw_operation}",
            operation=raw_operation,
        ) from None

    if operation is EditOperation.DELETE:
        return DeleteCommand(lines=lines)

    text = arguments.get("newText")
    if text is None:
        raise ContentRequiredError(
            message=f"New text is required for {operation.value} operation",
            operation=operation.value,
        )
    if not isinstance(text, str):
        raise InvalidParameterError(
            message="newText must be a string",
            parameter="newText",
            value=text,
            expected="string",
        )
    if operation is EditOperation.REPLACE:
        return ReplaceCommand(lines=lines, text=text)
    return InsertCommand(lines=lines, text=text)


def _unique(numbers: Sequence[int]) -> list[int]:
    seen: set[int] = set()
    ordered: list[int] = []
    for number in numbers:
        if number not in seen:
            seen.add(number)
            ordered.append(number)
    return ordered


def apply_edit(document: Document, command: EditCommand) -> list[int]:
    """Apply ``command`` to ``document`` in place.

    Returns the targeted line numbers that were acted on, in the caller's
    order with repeats collapsed. Numbers are reported as they were before
    any renumbering.

    Raises:
        LineLockedError: an existing target is locked. Raised before any
            mutation, so the document is left untouched.
    """

    locked = document.locked_lines(command.lines)
    if locked:
        LOGGER.warning(
            "Rejected %s on document %s: locked lines %s",
            command.operation.value,
            document.id,
            locked,
        )
        raise LineLockedError.for_lines(locked)

    if isinstance(command, ReplaceCommand):
        acted = [number for number in _unique(command.lines) if document.set_text(number, command.text)]
    elif isinstance(command, DeleteCommand):
        removed = set(document.remove_lines(command.lines))
        acted = [number for number in _unique(command.lines) if number in removed]
    else:
        acted = _unique(document.insert_after(command.lines, command.text))

    for number in acted:
        LOGGER.debug("%s applied at line %d", command.operation.value, number)
    LOGGER.info(
        "doc_edit %s modified %d line(s); document %s now has %d line(s)",
        command.operation.value,
        len(acted),
        document.id,
        document.total_lines,
    )
    return acted


@dataclass
class DocEditTool(WriteTool):
    """Tool for replacing, inserting, or deleting lines.

    Parameters:
        operation: One of ``replace``, ``insert``, ``delete`` (required).
        lines: Target line numbers (required, non-empty).
        newText: Text for replace/insert (required for those, may be empty).
            A replace writes the same text to every targeted line.

    Returns:
        modifiedLines: Targets that were acted on, by their pre-edit numbers.
    """

    name: ClassVar[str] = "doc_edit"

    def validate(self, params: dict[str, Any]) -> None:
        params["_command"] = parse_edit_command(params)

    def write(self, document: Document, params: dict[str, Any]) -> dict[str, Any]:
        command: EditCommand = params["_command"]
        modified = apply_edit(document, command)
        return {"modifiedLines": modified, "operation": command.operation.value}

    def to_payload(self, result: ToolResult) -> dict[str, Any]:
        if result.success:
            modified = list(result.data.get("modifiedLines", [])) if result.data else []
            return {"success": True, "modifiedLines": modified}
        return {"success": False, "modifiedLines": [], "error": result.error_message or "Unknown error"}


__all__ = [
    "DeleteCommand",
    "DocEditTool",
    "EditCommand",
    "EditOperation",
    "InsertCommand",
    "ReplaceCommand",
    "apply_edit",
    "parse_edit_command",
]
