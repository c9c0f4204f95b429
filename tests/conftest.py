"""Shared pytest fixtures."""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from docline.documents.model import Document
from docline.utils import logging as docline_logging
from helpers import build_document


@pytest.fixture
def abc_document() -> Document:
    return build_document(["A", "B", "C"])


@pytest.fixture
def numbered_document() -> Document:
    """Twelve lines, ``line 1`` .. ``line 12``, five lines per page."""

    return build_document([f"line {n}" for n in range(1, 13)], lines_per_page=5)


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("DOCLINE_LOG_DIR", str(tmp_path / "logs"))
    for name in (
        "DOCLINE_API_KEY",
        "DOCLINE_BASE_URL",
        "DOCLINE_MODEL",
        "DOCLINE_TEMPERATURE",
        "DOCLINE_REQUEST_TIMEOUT",
        "DOCLINE_DEBUG_LOGGING",
        "DOCLINE_SETTINGS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(docline_logging, "_CONFIGURED", False)
    monkeypatch.setattr(docline_logging, "_LOG_PATH", None)
    yield
    # Drop the file and console handlers installed by setup_logging.
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
