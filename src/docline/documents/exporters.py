"""Render a line store back into text or Word formats."""

from __future__ import annotations

import logging
from pathlib import Path

import docx
from docx.shared import Inches

from ..utils.file_io import write_text
from .model import Document

LOGGER = logging.getLogger(__name__)

EXPORT_SUFFIXES = {"docx": ".docx", "markdown": ".md", "text": ".txt"}
BINARY_FORMATS = frozenset({"docx"})
DOCX_MARGIN = Inches(0.5)


def export_markdown(document: Document) -> str:
    """Join line texts with newlines; markdown syntax is carried verbatim."""

    return "\n".join(line.text for line in document.lines)


def export_docx(document: Document, path: Path | str) -> Path:
    """Save ``document`` as a Word file with one paragraph per line."""

    target = Path(path)
    output = docx.Document()
    for section in output.sections:
        section.top_margin = section.bottom_margin = DOCX_MARGIN
        section.left_margin = section.right_margin = DOCX_MARGIN
    for line in document.lines:
        output.add_paragraph(line.text)
    target.parent.mkdir(parents=True, exist_ok=True)
    output.save(str(target))
    return target


def export_to_path(document: Document, path: Path | str, *, fmt: str = "markdown") -> Path:
    """Write ``document`` to ``path``, appending the format suffix when missing."""

    suffix = EXPORT_SUFFIXES.get(fmt)
    if suffix is None:
        raise ValueError(f"Unsupported export format '{fmt}'")
    target = Path(path)
    if target.suffix.lower() != suffix:
        target = target.with_name(target.name + suffix)
    if fmt == "docx":
        export_docx(document, target)
    else:
        write_text(target, export_markdown(document))
    LOGGER.info("Exported %d lines to %s", len(document), target)
    return target


__all__ = ["BINARY_FORMATS", "EXPORT_SUFFIXES", "export_docx", "export_markdown", "export_to_path"]
