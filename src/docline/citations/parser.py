"""Scan free-form user text for line, range, and page reference tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from ..documents.ranges import LineRange

__all__ = [
    "CITATION_PATTERN",
    "Citation",
    "CitationKind",
    "parse_citations",
]


class CitationKind(str, Enum):
    """Supported reference token kinds."""

    LINE = "line"
    RANGE = "range"
    PAGE = "page"


# Longer keywords come first so "@line5" is not read as "@l" + "ine5".
CITATION_PATTERN = re.compile(
    r"@(?P<keyword>line|page|l|p)(?P<start>\d+)(?:-(?P<end>\d+))?(?!\w)"
)
_LINE_KEYWORDS = {"line", "l"}


@dataclass(slots=True, frozen=True)
class Citation:
    """A parsed reference token plus, once resolved, its lines and text.

    For page citations ``line_numbers`` stays empty until the resolver maps
    ``page_number`` onto a concrete document. Range citations likewise keep
    only their ``span`` until resolution, which bounds it by the document.
    """

    kind: CitationKind
    raw_token: str
    line_numbers: tuple[int, ...] = ()
    resolved_text: str = ""
    page_number: int | None = None
    span: LineRange | None = None
    start: int = field(default=0, compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.resolved_text

    def with_resolution(self, line_numbers: tuple[int, ...], resolved_text: str) -> Citation:
        return replace(self, line_numbers=line_numbers, resolved_text=resolved_text)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the chat payload field names."""

        return {
            "type": self.kind.value,
            "reference": self.raw_token,
            "lineNumbers": list(self.line_numbers),
            "resolvedContent": self.resolved_text,
        }


def parse_citations(text: str | None) -> list[Citation]:
    """Return citations in order of first appearance; repeats are kept.

    Malformed tokens never raise, they are left as plain text.
    """

    citations: list[Citation] = []
    for match in CITATION_PATTERN.finditer(text or ""):
        citation = _citation_from_match(match)
        if citation is not None:
            citations.append(citation)
    return citations


def _citation_from_match(match: re.Match[str]) -> Citation | None:
    keyword = match.group("keyword")
    start = int(match.group("start"))
    end_group = match.group("end")

    if keyword in _LINE_KEYWORDS:
        if keyword == "l" and end_group is not None:
            span = LineRange(start, int(end_group))
            return Citation(
                kind=CitationKind.RANGE,
                raw_token=match.group(0),
                span=span,
                start=match.start(),
            )
        return Citation(
            kind=CitationKind.LINE,
            raw_token=_token_without_suffix(match),
            line_numbers=(start,),
            start=match.start(),
        )

    return Citation(
        kind=CitationKind.PAGE,
        raw_token=_token_without_suffix(match),
        page_number=start,
        start=match.start(),
    )


def _token_without_suffix(match: re.Match[str]) -> str:
    # "@line5-9" and "@p3-4" only cite the first number; the suffix stays plain text.
    if match.group("end") is None:
        return match.group(0)
    return match.group(0)[: match.end("start") - match.start()]
