"""Line lookup by number (``doc_read``)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable

from ...documents.model import Document, Line
from .base import ReadOnlyTool, ToolResult
from .validation import coerce_line_numbers

LOGGER = logging.getLogger(__name__)


def read_lines(document: Document, line_numbers: Iterable[int]) -> list[Line]:
    """Return the existing lines among ``line_numbers`` in ascending order.

    Missing numbers are omitted and repeats collapse to one entry.
    """

    wanted = sorted({number for number in line_numbers if document.has_line(number)})
    return [document.lines[number - 1] for number in wanted]


@dataclass
class DocReadTool(ReadOnlyTool):
    """Tool for fetching specific lines.

    Parameters:
        lines: Line numbers to read (required, non-empty; any order, repeats allowed).

    Returns:
        lines: The found lines in ascending line-number order. A number
            requested more than once is returned once.
    """

    name: ClassVar[str] = "doc_read"

    def validate(self, params: dict[str, Any]) -> None:
        params["lines"] = coerce_line_numbers(params.get("lines"))

    def read(self, document: Document, params: dict[str, Any]) -> dict[str, Any]:
        requested = params["lines"]
        found = read_lines(document, requested)
        LOGGER.info("doc_read found %d of %d requested line(s)", len(found), len(set(requested)))
        return {"lines": [line.to_dict() for line in found]}

    def to_payload(self, result: ToolResult) -> dict[str, Any]:
        if result.success:
            lines = list(result.data.get("lines", [])) if result.data else []
            return {"success": True, "lines": lines}
        return {"success": False, "lines": [], "error": result.error_message or "Unknown error"}


__all__ = ["DocReadTool", "read_lines"]
