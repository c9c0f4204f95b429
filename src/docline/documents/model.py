"""Dataclasses representing a line-addressable document and its metadata."""

from __future__ import annotations

import copy
import math
import uuid
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

__all__ = [
    "DEFAULT_LINES_PER_PAGE",
    "DOCUMENT_FORMATS",
    "Document",
    "DocumentFormat",
    "DocumentFormatError",
    "DocumentInvariantError",
    "DocumentMetadata",
    "Line",
]

DEFAULT_LINES_PER_PAGE = 50
DocumentFormat = Literal["docx", "pdf", "markdown"]
DOCUMENT_FORMATS: tuple[str, ...] = ("docx", "pdf", "markdown")


class DocumentFormatError(ValueError):
    """Raised when a serialized document payload cannot be decoded."""


class DocumentInvariantError(RuntimeError):
    """Raised when line numbering or metadata drift from the stored lines."""


@dataclass(slots=True)
class Line:
    """One addressable unit of document text."""

    line_number: int
    text: str
    page_number: int = 1
    is_locked: bool = False
    is_placeholder: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the line in its JSON wire shape."""

        return {
            "lineNumber": self.line_number,
            "text": self.text,
            "pageNumber": self.page_number,
            "isLocked": self.is_locked,
            "isPlaceholder": self.is_placeholder,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Line:
        if not isinstance(payload, Mapping):
            raise DocumentFormatError("Line entries must be objects")
        text = payload.get("text", "")
        if not isinstance(text, str):
            raise DocumentFormatError("Line text must be a string")
        try:
            line_number = int(payload.get("lineNumber", 0))
            page_number = int(payload.get("pageNumber", 1))
        except (TypeError, ValueError) as exc:
            raise DocumentFormatError("lineNumber and pageNumber must be integers") from exc
        return cls(
            line_number=line_number,
            text=text,
            page_number=max(1, page_number),
            is_locked=_flag(payload, "isLocked"),
            is_placeholder=_flag(payload, "isPlaceholder"),
        )


def _flag(payload: Mapping[str, Any], key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DocumentFormatError(f"{key} must be a boolean")
    return value


@dataclass(slots=True)
class DocumentMetadata:
    """Metadata describing the loaded document."""

    total_lines: int = 0
    total_pages: int = 0
    format: str = "markdown"
    file_name: str | None = None
    file_size: int | None = None
    uploaded_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "totalLines": self.total_lines,
            "totalPages": self.total_pages,
            "format": self.format,
        }
        if self.file_name is not None:
            payload["fileName"] = self.file_name
        if self.file_size is not None:
            payload["fileSize"] = self.file_size
        if self.uploaded_at is not None:
            payload["uploadedAt"] = self.uploaded_at
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> DocumentMetadata:
        data = dict(payload or {})
        fmt = str(data.get("format") or "markdown").lower()
        if fmt not in DOCUMENT_FORMATS:
            raise DocumentFormatError(f"Unsupported document format '{fmt}'")
        file_size = data.get("fileSize")
        return cls(
            total_lines=int(data.get("totalLines", 0) or 0),
            total_pages=int(data.get("totalPages", 0) or 0),
            format=fmt,
            file_name=data.get("fileName"),
            file_size=int(file_size) if file_size is not None else None,
            uploaded_at=data.get("uploadedAt"),
        )


@dataclass(slots=True)
class Document:
    """Ordered, contiguously numbered line store backing one document.

    ``lines[i].line_number == i + 1`` holds whenever the store is observed
    between operations, and ``metadata.total_lines`` always equals
    ``len(lines)``. Line numbers are positions, not identities: they are
    reassigned whenever lines are inserted or removed. Page numbers are
    assigned at ingestion and never recomputed.

    The text mutators in the "Edit primitives" section are reserved for the
    edit executor (:mod:`docline.ai.tools.doc_edit`). ``set_locked`` is the
    user-facing lock toggle and never renumbers. Every other component only
    reads.
    """

    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    lines: list[Line] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    def __post_init__(self) -> None:
        self._renumber()

    # ------------------------------------------------------------------
    # Construction / serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_texts(
        cls,
        texts: Iterable[str],
        *,
        lines_per_page: int = DEFAULT_LINES_PER_PAGE,
        format: str = "markdown",
        file_name: str | None = None,
        document_id: str | None = None,
    ) -> Document:
        """Build a store from raw line strings, paginating every ``lines_per_page`` lines."""

        per_page = max(1, int(lines_per_page))
        lines = [
            Line(line_number=index, text=text, page_number=math.ceil(index / per_page))
            for index, text in enumerate(texts, start=1)
        ]
        metadata = DocumentMetadata(
            total_pages=math.ceil(len(lines) / per_page),
            format=format,
            file_name=file_name,
        )
        return cls(id=document_id or uuid.uuid4().hex, lines=lines, metadata=metadata)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Document:
        """Decode the JSON wire shape; incoming lines are renumbered in list order."""

        if not isinstance(payload, Mapping):
            raise DocumentFormatError("Document payload must be an object")
        raw_lines = payload.get("lines", [])
        if not isinstance(raw_lines, Sequence) or isinstance(raw_lines, (str, bytes)):
            raise DocumentFormatError("Document 'lines' must be a list")
        lines = [Line.from_dict(entry) for entry in raw_lines]
        metadata = DocumentMetadata.from_dict(payload.get("metadata"))
        document_id = str(payload.get("id") or uuid.uuid4().hex)
        return cls(id=document_id, lines=lines, metadata=metadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "lines": [line.to_dict() for line in self.lines],
            "metadata": self.metadata.to_dict(),
        }

    def copy(self) -> Document:
        """Return a deep copy, useful for before/after comparisons."""

        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def total_lines(self) -> int:
        return len(self.lines)

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)

    def has_line(self, line_number: int) -> bool:
        return 1 <= line_number <= len(self.lines)

    def get_line(self, line_number: int) -> Line | None:
        """Return the line at ``line_number`` (1-based) or ``None``."""

        if not self.has_line(line_number):
            return None
        return self.lines[line_number - 1]

    def lines_on_page(self, page_number: int) -> list[Line]:
        return [line for line in self.lines if line.page_number == page_number]

    def locked_lines(self, line_numbers: Iterable[int]) -> list[int]:
        """Return the distinct, ascending subset of ``line_numbers`` that are locked."""

        locked = {
            number
            for number in line_numbers
            if self.has_line(number) and self.lines[number - 1].is_locked
        }
        return sorted(locked)

    def check_invariants(self) -> None:
        for index, line in enumerate(self.lines):
            if line.line_number != index + 1:
                raise DocumentInvariantError(
                    f"Line at position {index} is numbered {line.line_number}, expected {index + 1}"
                )
        if self.metadata.total_lines != len(self.lines):
            raise DocumentInvariantError(
                f"metadata.total_lines={self.metadata.total_lines} but store holds {len(self.lines)} lines"
            )

    # ------------------------------------------------------------------
    # Edit primitives
    # ------------------------------------------------------------------

    def set_text(self, line_number: int, text: str) -> bool:
        """Replace the text of one line; returns ``False`` when the line does not exist."""

        line = self.get_line(line_number)
        if line is None:
            return False
        line.text = text
        return True

    def remove_lines(self, line_numbers: Iterable[int]) -> list[int]:
        """Remove every line whose current number is targeted and renumber the rest.

        Returns the removed numbers in ascending order.
        """

        targets = set(line_numbers)
        removed = [line.line_number for line in self.lines if line.line_number in targets]
        if removed:
            self.lines = [line for line in self.lines if line.line_number not in targets]
            self._renumber()
        return removed

    def insert_after(self, line_numbers: Sequence[int], text: str) -> list[int]:
        """Splice a new unlocked line after each targeted line.

        Targets are read left to right against the numbering in effect before
        this call, so ``[1, 2]`` on ``A B C`` yields ``A X B X C``. The new
        line inherits the page number of its anchor. Returns the targets that
        resolved, in call order (repeats included).
        """

        anchors = list(self.lines)
        inserted_after: dict[int, list[Line]] = {}
        acted: list[int] = []
        for number in line_numbers:
            if not 1 <= number <= len(anchors):
                continue
            anchor = anchors[number - 1]
            inserted_after.setdefault(id(anchor), []).append(
                Line(line_number=0, text=text, page_number=anchor.page_number)
            )
            acted.append(number)
        if not acted:
            return acted

        spliced: list[Line] = []
        for line in anchors:
            spliced.append(line)
            spliced.extend(inserted_after.get(id(line), ()))
        self.lines = spliced
        self._renumber()
        return acted

    def set_locked(self, line_numbers: Iterable[int], locked: bool = True) -> list[int]:
        """Lock or unlock the targeted lines in place; numbering is untouched.

        Returns the distinct existing targets in ascending order, whether or
        not their flag actually changed.
        """

        targets = sorted({number for number in line_numbers if self.has_line(number)})
        for number in targets:
            self.lines[number - 1].is_locked = locked
        return targets

    def _renumber(self) -> None:
        for index, line in enumerate(self.lines, start=1):
            line.line_number = index
        self.metadata.total_lines = len(self.lines)
