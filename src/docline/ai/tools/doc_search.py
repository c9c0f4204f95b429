"""Keyword search over a line store (``doc_search``)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar

from ...documents.model import Document
from .base import ReadOnlyTool, ToolResult
from .validation import coerce_int

LOGGER = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
MAX_LIMIT = 20
EXACT_MATCH_SCORE = 1.0
PARTIAL_MATCH_SCORE = 0.5


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Represents a single matching line."""

    line_number: int
    text: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"lineNumber": self.line_number, "text": self.text, "score": self.score}


def normalize_limit(limit: int | None, *, default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Clamp ``limit`` to ``maximum``; missing or non-positive values fall back to ``default``."""

    if limit is None or limit <= 0:
        return min(default, maximum)
    return min(limit, maximum)


def search_lines(
    document: Document,
    query: str,
    limit: int | None = None,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> list[SearchResult]:
    """Case-insensitive substring search.

    A line whose full text equals the query scores 1.0, any other containing
    line scores 0.5, and non-matching lines are excluded. Results are ordered
    by score descending then line number ascending, and truncated to the
    normalized limit. Blank queries return no results.
    """

    if not query or not query.strip():
        LOGGER.debug("Empty search query on document %s", document.id)
        return []

    needle = query.lower()
    matches: list[SearchResult] = []
    for line in document.lines:
        haystack = line.text.lower()
        if needle not in haystack:
            continue
        score = EXACT_MATCH_SCORE if haystack == needle else PARTIAL_MATCH_SCORE
        matches.append(SearchResult(line_number=line.line_number, text=line.text, score=score))

    matches.sort(key=lambda match: (-match.score, match.line_number))
    effective = normalize_limit(limit, default=default_limit, maximum=max_limit)
    LOGGER.info(
        "doc_search %r matched %d line(s), returning %d",
        query,
        len(matches),
        min(len(matches), effective),
    )
    return matches[:effective]


@dataclass
class DocSearchTool(ReadOnlyTool):
    """Tool for locating lines by keyword.

    Parameters:
        query: Text to look for (case-insensitive substring).
        limit: Maximum results (default 5, capped at 20).

    Returns:
        results: List of ``{lineNumber, text, score}`` entries.
    """

    name: ClassVar[str] = "doc_search"

    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_LIMIT

    def read(self, document: Document, params: dict[str, Any]) -> dict[str, Any]:
        query = params.get("query")
        if not isinstance(query, str):
            query = "" if query is None else str(query)
        raw_limit = params.get("limit")
        limit = None if raw_limit is None else coerce_int(raw_limit, parameter="limit")
        results = search_lines(
            document,
            query,
            limit,
            default_limit=self.default_limit,
            max_limit=self.max_limit,
        )
        return {"results": [result.to_dict() for result in results]}

    def to_payload(self, result: ToolResult) -> list[dict[str, Any]]:
        if not result.success or not result.data:
            return []
        return list(result.data.get("results", []))


__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "DocSearchTool",
    "SearchResult",
    "normalize_limit",
    "search_lines",
]
