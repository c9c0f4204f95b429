"""Tests for the line store model."""

from __future__ import annotations

import pytest

from docline.documents.model import (
    Document,
    DocumentFormatError,
    DocumentInvariantError,
    DocumentMetadata,
    Line,
)
from helpers import build_document, numbers, texts


class TestFromTexts:
    def test_numbers_lines_and_pages(self) -> None:
        document = Document.from_texts([f"t{i}" for i in range(1, 8)], lines_per_page=3)

        assert numbers(document) == [1, 2, 3, 4, 5, 6, 7]
        assert [line.page_number for line in document.lines] == [1, 1, 1, 2, 2, 2, 3]
        assert document.metadata.total_lines == 7
        assert document.metadata.total_pages == 3

    def test_default_page_size_is_fifty(self) -> None:
        document = Document.from_texts(["x"] * 51)

        assert document.lines[49].page_number == 1
        assert document.lines[50].page_number == 2

    def test_empty_store(self) -> None:
        document = Document.from_texts([])

        assert len(document) == 0
        assert document.metadata.total_lines == 0
        assert document.metadata.total_pages == 0
        document.check_invariants()


class TestWireFormat:
    def test_round_trip_uses_camel_case(self) -> None:
        document = build_document(["alpha", "beta"], locked=[2])
        document.metadata.file_name = "notes.md"

        payload = document.to_dict()

        assert payload["lines"][1] == {
            "lineNumber": 2,
            "text": "beta",
            "pageNumber": 1,
            "isLocked": True,
            "isPlaceholder": False,
        }
        assert payload["metadata"] == {
            "totalLines": 2,
            "totalPages": 1,
            "format": "markdown",
            "fileName": "notes.md",
        }
        assert Document.from_dict(payload).to_dict() == payload

    def test_from_dict_renumbers_in_list_order(self) -> None:
        payload = {
            "id": "d",
            "lines": [
                {"lineNumber": 7, "text": "first", "pageNumber": 2},
                {"lineNumber": 3, "text": "second"},
            ],
            "metadata": {"totalLines": 99, "totalPages": 2, "format": "pdf"},
        }

        document = Document.from_dict(payload)

        assert numbers(document) == [1, 2]
        assert texts(document) == ["first", "second"]
        assert document.lines[1].page_number == 1
        assert document.metadata.total_lines == 2
        assert document.metadata.format == "pdf"

    def test_optional_metadata_fields(self) -> None:
        metadata = DocumentMetadata.from_dict(
            {"totalLines": 1, "totalPages": 1, "format": "docx", "fileSize": "120", "uploadedAt": "2024-01-01T00:00:00Z"}
        )

        assert metadata.file_size == 120
        assert metadata.to_dict()["uploadedAt"] == "2024-01-01T00:00:00Z"

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"lines": "nope"},
            {"lines": [{"text": 5}]},
            {"lines": [{"text": "x", "lineNumber": "abc"}]},
            {"lines": [], "metadata": {"format": "odt"}},
            {"lines": [{"text": "x", "isLocked": "false"}]},
            {"lines": [{"text": "x", "isPlaceholder": 1}]},
        ],
    )
    def test_rejects_malformed_payloads(self, payload) -> None:
        with pytest.raises(DocumentFormatError):
            Document.from_dict(payload)


    def test_absent_or_null_flags_default_to_false(self) -> None:
        document = Document.from_dict({"lines": [{"text": "x"}, {"text": "y", "isLocked": None}]})

        assert [line.is_locked for line in document.lines] == [False, False]
        assert not document.lines[0].is_placeholder


class TestReadHelpers:
    def test_get_and_has_line(self, abc_document: Document) -> None:
        assert abc_document.get_line(2).text == "B"
        assert abc_document.get_line(0) is None
        assert abc_document.get_line(4) is None
        assert abc_document.has_line(3)
        assert not abc_document.has_line(-1)

    def test_lines_on_page(self, numbered_document: Document) -> None:
        assert [line.line_number for line in numbered_document.lines_on_page(2)] == [6, 7, 8, 9, 10]
        assert numbered_document.lines_on_page(9) == []

    def test_locked_lines_ignores_missing_and_duplicates(self) -> None:
        document = build_document(["a", "b", "c", "d"], locked=[1, 3])

        assert document.locked_lines([3, 99, 1, 3, 2]) == [1, 3]

    def test_text_joins_lines(self, abc_document: Document) -> None:
        assert abc_document.text == "A\nB\nC"

    def test_copy_is_deep(self, abc_document: Document) -> None:
        clone = abc_document.copy()
        clone.lines[0].text = "changed"

        assert abc_document.lines[0].text == "A"
        assert clone.id == abc_document.id


class TestInvariants:
    def test_detects_numbering_gap(self, abc_document: Document) -> None:
        abc_document.lines[1].line_number = 5

        with pytest.raises(DocumentInvariantError):
            abc_document.check_invariants()

    def test_detects_stale_total(self, abc_document: Document) -> None:
        abc_document.metadata.total_lines = 10

        with pytest.raises(DocumentInvariantError):
            abc_document.check_invariants()

    def test_invariant_error_survives_optimized_mode(self) -> None:
        assert issubclass(DocumentInvariantError, RuntimeError)
        assert not issubclass(DocumentInvariantError, AssertionError)

    def test_constructor_renumbers(self) -> None:
        document = Document(lines=[Line(line_number=4, text="x"), Line(line_number=4, text="y")])

        assert numbers(document) == [1, 2]
        assert document.metadata.total_lines == 2


class TestEditPrimitives:
    def test_set_text(self, abc_document: Document) -> None:
        assert abc_document.set_text(2, "Z") is True
        assert abc_document.set_text(9, "Z") is False
        assert texts(abc_document) == ["A", "Z", "C"]

    def test_remove_lines_renumbers(self, abc_document: Document) -> None:
        removed = abc_document.remove_lines([3, 1, 8])

        assert removed == [1, 3]
        assert texts(abc_document) == ["B"]
        assert numbers(abc_document) == [1]
        assert abc_document.metadata.total_lines == 1

    def test_insert_after_uses_pre_insert_numbering(self, abc_document: Document) -> None:
        acted = abc_document.insert_after([1, 2], "X")

        assert acted == [1, 2]
        assert texts(abc_document) == ["A", "X", "B", "X", "C"]
        assert numbers(abc_document) == [1, 2, 3, 4, 5]
        abc_document.check_invariants()

    def test_insert_after_inherits_page_and_is_unlocked(self) -> None:
        document = build_document(["a", "b"], locked=[2], pages=[1, 4])

        document.insert_after([2], "new")

        inserted = document.lines[2]
        assert inserted.page_number == 4
        assert inserted.is_locked is False
        assert inserted.is_placeholder is False

    def test_insert_after_repeated_anchor(self, abc_document: Document) -> None:
        acted = abc_document.insert_after([1, 1], "X")

        assert acted == [1, 1]
        assert texts(abc_document) == ["A", "X", "X", "B", "C"]

    def test_insert_after_missing_anchor_is_noop(self, abc_document: Document) -> None:
        assert abc_document.insert_after([0, 4], "X") == []
        assert texts(abc_document) == ["A", "B", "C"]


class TestSetLocked:
    def test_locks_existing_lines_without_renumbering(self, abc_document: Document) -> None:
        acted = abc_document.set_locked([3, 1, 3, 9])

        assert acted == [1, 3]
        assert [line.is_locked for line in abc_document.lines] == [True, False, True]
        assert numbers(abc_document) == [1, 2, 3]
        assert texts(abc_document) == ["A", "B", "C"]
        abc_document.check_invariants()

    def test_unlock(self) -> None:
        document = build_document(["a", "b"], locked=[1, 2])

        assert document.set_locked([2], locked=False) == [2]
        assert document.locked_lines([1, 2]) == [1]

    def test_missing_targets_are_noop(self, abc_document: Document) -> None:
        assert abc_document.set_locked([0, 4]) == []
        assert abc_document.locked_lines([1, 2, 3]) == []
