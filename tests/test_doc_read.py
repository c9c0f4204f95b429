"""Tests for the doc_read tool."""

from __future__ import annotations

import pytest

from docline.ai.tools.base import ToolContext
from docline.ai.tools.doc_read import DocReadTool, read_lines
from docline.ai.tools.errors import ErrorCode, InvalidParameterError, MissingParameterError
from docline.documents.model import Document


class TestReadLines:
    def test_returns_ascending_unique_lines(self, numbered_document: Document) -> None:
        found = read_lines(numbered_document, [9, 2, 9, 4])

        assert [line.line_number for line in found] == [2, 4, 9]

    def test_missing_numbers_are_omitted(self, numbered_document: Document) -> None:
        found = read_lines(numbered_document, [0, 3, 13, -1])

        assert [line.text for line in found] == ["line 3"]


class TestDocReadTool:
    def test_payload_shape(self, abc_document: Document) -> None:
        tool = DocReadTool()

        result = tool.run(ToolContext(document=abc_document), {"lines": [3, 1]})

        assert tool.to_payload(result) == {
            "success": True,
            "lines": [
                {"lineNumber": 1, "text": "A", "pageNumber": 1, "isLocked": False, "isPlaceholder": False},
                {"lineNumber": 3, "text": "C", "pageNumber": 1, "isLocked": False, "isPlaceholder": False},
            ],
        }

    def test_no_existing_lines_is_still_success(self, abc_document: Document) -> None:
        tool = DocReadTool()

        result = tool.run(ToolContext(document=abc_document), {"lines": [40]})

        assert tool.to_payload(result) == {"success": True, "lines": []}

    @pytest.mark.parametrize("params", [{}, {"lines": None}, {"lines": []}])
    def test_missing_lines(self, abc_document: Document, params) -> None:
        tool = DocReadTool()

        result = tool.run(ToolContext(document=abc_document), params)

        assert isinstance(result.error, MissingParameterError)
        assert result.error.error_code == ErrorCode.VALIDATION_ERROR
        assert tool.to_payload(result) == {"success": False, "lines": [], "error": "No line numbers provided"}

    @pytest.mark.parametrize("lines", ["1,2", 3, [1, "2"], [True], [1.5]])
    def test_invalid_lines(self, abc_document: Document, lines) -> None:
        tool = DocReadTool()

        result = tool.run(ToolContext(document=abc_document), {"lines": lines})

        assert not result.success
        assert isinstance(result.error, InvalidParameterError)

    def test_read_does_not_mutate(self, abc_document: Document) -> None:
        before = abc_document.to_dict()

        DocReadTool().run(ToolContext(document=abc_document), {"lines": [1, 2, 3]})

        assert abc_document.to_dict() == before
