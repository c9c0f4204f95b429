"""File import helpers that convert external formats into a line store."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, Sequence

import docx
from pypdf import PdfReader

from ..utils.file_io import read_text
from .model import DEFAULT_LINES_PER_PAGE, Document, DocumentMetadata, Line

_LOGGER = logging.getLogger(__name__)

PLACEHOLDER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\{\{.*?\}\}"),
    re.compile(r"\[[A-Z_]+\]"),
    re.compile(r"_{5,}"),
)
_HEADER_RE = re.compile(r"^(#{1,6})\s+(.+)$")


class ImporterError(RuntimeError):
    """Raised when a file import operation fails."""


def is_placeholder_line(text: str) -> bool:
    """Return ``True`` when ``text`` contains template placeholder markers."""

    return any(pattern.search(text) for pattern in PLACEHOLDER_PATTERNS)


def markdown_title(text: str) -> str | None:
    """Return the first H1 heading of a markdown body, if any."""

    for raw in text.split("\n"):
        match = _HEADER_RE.match(raw)
        if match and match.group(1) == "#":
            return match.group(2).strip()
    return None


@dataclass(slots=True)
class ImportResult:
    """Outcome returned by a file import handler."""

    document: Document
    title: str | None = None
    notes: str | None = None


class ImportHandler(Protocol):
    """Protocol implemented by concrete import handlers."""

    name: str
    extensions: tuple[str, ...]

    def supports(self, path: Path) -> bool:
        """Return True if the handler can process the provided path."""
        ...

    def import_file(self, path: Path) -> ImportResult:
        """Convert the file into a line store."""
        ...


class FileImporter:
    """Registry-driven facade for converting external file formats."""

    def __init__(self, handlers: Sequence[ImportHandler] | None = None) -> None:
        if handlers is None:
            handlers = (MarkdownImportHandler(), PDFImportHandler(), DocxImportHandler())
        self._handlers: list[ImportHandler] = list(handlers)

    def import_file(self, path: Path | str) -> ImportResult:
        target = Path(path)
        if not target.exists():
            raise FileNotFoundError(target)
        handler = self._select_handler(target)
        if handler is None:
            raise ImporterError(f"No import handler registered for '{target.suffix or target}'.")
        result = handler.import_file(target)
        _LOGGER.info(
            "Imported %s via %s: %d lines across %d pages",
            target.name,
            handler.name,
            result.document.metadata.total_lines,
            result.document.metadata.total_pages,
        )
        return result

    def _select_handler(self, path: Path) -> ImportHandler | None:
        for handler in self._handlers:
            if handler.supports(path):
                return handler
        return None


def _stamp_metadata(metadata: DocumentMetadata, path: Path) -> None:
    metadata.file_name = path.name
    metadata.file_size = path.stat().st_size
    metadata.uploaded_at = datetime.now(timezone.utc).isoformat()


class MarkdownImportHandler:
    """Split markdown or plain text line by line with estimated pagination."""

    name: str = "markdown"
    extensions: tuple[str, ...] = (".md", ".markdown", ".txt")

    def __init__(self, *, lines_per_page: int = DEFAULT_LINES_PER_PAGE) -> None:
        self._lines_per_page = max(1, int(lines_per_page))

    def supports(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def import_file(self, path: Path) -> ImportResult:
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ImporterError(f"Unable to read {path.name}: {exc}") from exc
        return ImportResult(document=self.parse(content, path=path), title=markdown_title(content) or path.stem)

    def parse(self, content: str, *, path: Path | None = None) -> Document:
        """Convert raw markdown into a store; whitespace-only content yields no lines."""

        texts = content.split("\n") if content.strip() else []
        document = Document.from_texts(texts, lines_per_page=self._lines_per_page, format="markdown")
        for line in document.lines:
            line.is_placeholder = is_placeholder_line(line.text)
        if path is not None:
            _stamp_metadata(document.metadata, path)
        return document


class PDFImportHandler:
    """Convert PDF files into lines tagged with their physical page using pypdf."""

    name: str = "pdf"
    extensions: tuple[str, ...] = (".pdf",)

    def __init__(self, *, reader_cls: type | None = None) -> None:
        self._reader_cls = reader_cls or PdfReader

    def supports(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def import_file(self, path: Path) -> ImportResult:
        try:
            reader = self._reader_cls(str(path))
        except FileNotFoundError:
            raise
        except Exception as exc:
            raise ImporterError(f"Unable to open PDF: {exc}") from exc

        lines: list[Line] = []
        pages = list(getattr(reader, "pages", []))
        for page_number, page in enumerate(pages, start=1):
            try:
                chunk = str(page.extract_text() or "")
            except Exception as exc:  # pragma: no cover - pypdf decoding failures vary
                _LOGGER.warning("Failed to extract page %s of %s: %s", page_number, path.name, exc)
                continue
            for raw in chunk.split("\n"):
                text = raw.strip()
                if not text:
                    continue
                lines.append(
                    Line(
                        line_number=len(lines) + 1,
                        text=text,
                        page_number=page_number,
                        is_placeholder=is_placeholder_line(text),
                    )
                )

        if not lines:
            _LOGGER.warning("No extractable text found in %s", path.name)
        metadata = DocumentMetadata(total_pages=len(pages), format="pdf")
        _stamp_metadata(metadata, path)
        return ImportResult(
            document=Document(lines=lines, metadata=metadata),
            title=path.stem,
            notes="Imported from PDF",
        )


class DocxImportHandler:
    """Convert Word documents into one trimmed line per paragraph using python-docx.

    Word files carry no reliable page breaks, so pages are estimated every
    ``lines_per_page`` lines like plain text.
    """

    name: str = "docx"
    extensions: tuple[str, ...] = (".docx",)

    def __init__(self, *, lines_per_page: int = DEFAULT_LINES_PER_PAGE) -> None:
        self._lines_per_page = max(1, int(lines_per_page))

    def supports(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def import_file(self, path: Path) -> ImportResult:
        try:
            source = docx.Document(str(path))
        except FileNotFoundError:
            raise
        except Exception as exc:
            raise ImporterError(f"Unable to open DOCX: {exc}") from exc

        texts: list[str] = []
        for paragraph in source.paragraphs:
            # Soft line breaks inside a paragraph surface as "\n".
            texts.extend(raw.strip() for raw in paragraph.text.split("\n"))
        if not any(texts):
            _LOGGER.warning("No text content found in %s", path.name)
            texts = []

        document = Document.from_texts(texts, lines_per_page=self._lines_per_page, format="docx")
        for line in document.lines:
            line.is_placeholder = is_placeholder_line(line.text)
        _stamp_metadata(document.metadata, path)
        return ImportResult(document=document, title=path.stem, notes="Imported from DOCX")


__all__ = [
    "DocxImportHandler",
    "FileImporter",
    "ImportHandler",
    "ImportResult",
    "ImporterError",
    "MarkdownImportHandler",
    "PDFImportHandler",
    "PLACEHOLDER_PATTERNS",
    "is_placeholder_line",
    "markdown_title",
]
