"""Resolve parsed citations against a concrete line store."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..documents.model import Document, Line
from .parser import Citation, CitationKind

LOGGER = logging.getLogger(__name__)

__all__ = [
    "describe_unresolved",
    "format_citations_as_context",
    "format_lines",
    "resolve_citation",
    "resolve_citations",
]


def format_lines(lines: Iterable[Line]) -> str:
    """Render lines as ``Line {n}: {text}`` rows joined by newlines."""

    return "\n".join(f"Line {line.line_number}: {line.text}" for line in lines)


def resolve_citation(citation: Citation, document: Document) -> Citation:
    """Map one citation onto ``document``.

    Out-of-range numbers are dropped; page citations collect every line
    tagged with the requested page. An empty result still yields a citation,
    just with empty ``resolved_text``.
    """

    if citation.kind is CitationKind.PAGE:
        lines = document.lines_on_page(citation.page_number or 0)
    elif citation.span is not None:
        lines = [document.lines[n - 1] for n in citation.span.clamp(upper=document.total_lines)]
    else:
        numbers = sorted({n for n in citation.line_numbers if document.has_line(n)})
        lines = [document.lines[n - 1] for n in numbers]
    resolved = citation.with_resolution(
        tuple(line.line_number for line in lines),
        format_lines(lines),
    )
    if not lines:
        LOGGER.debug("Citation %s did not resolve to any lines", citation.raw_token)
    return resolved


def resolve_citations(citations: Sequence[Citation], document: Document) -> list[Citation]:
    """Resolve every citation, preserving order and keeping empty ones."""

    resolved = [resolve_citation(citation, document) for citation in citations]
    LOGGER.info(
        "Resolved %d citation(s), %d with content",
        len(resolved),
        sum(1 for citation in resolved if not citation.is_empty),
    )
    return resolved


def format_citations_as_context(citations: Sequence[Citation]) -> str:
    """Build the aggregate context block for a message.

    Non-empty citations are rendered in appearance order, separated by
    blank lines. Returns ``""`` when nothing resolved.
    """

    return "\n\n".join(citation.resolved_text for citation in citations if not citation.is_empty)


def describe_unresolved(citations: Sequence[Citation]) -> str:
    """Return a short note naming citations that matched nothing, or ``""``."""

    missing: list[str] = []
    for citation in citations:
        if citation.is_empty and citation.raw_token not in missing:
            missing.append(citation.raw_token)
    if not missing:
        return ""
    verb = "does" if len(missing) == 1 else "do"
    return f"{', '.join(missing)} {verb} not match any lines"
