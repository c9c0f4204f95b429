"""Tests for the tool error hierarchy."""

from __future__ import annotations

from docline.ai.tools.errors import (
    ContentRequiredError,
    ErrorCode,
    InvalidParameterError,
    LineLockedError,
    MissingParameterError,
    ToolError,
    UnknownOperationError,
    UnknownToolError,
    ValidationError,
)


class TestToolError:
    def test_is_exception_with_message(self) -> None:
        error = ToolError(error_code="custom", message="went wrong")

        assert isinstance(error, Exception)
        assert error.args == ("went wrong",)
        assert str(error) == "[custom] went wrong"

    def test_to_dict_omits_empty_fields(self) -> None:
        assert ToolError(error_code="x", message="m").to_dict() == {"error": "x", "message": "m"}

    def test_details_and_suggestion_are_serialized(self) -> None:
        payload = ValidationError(message="bad", details={"path": ["lines"]}, suggestion="fix it").to_dict()

        assert payload["error"] == ErrorCode.VALIDATION_ERROR
        assert payload["details"] == {"path": ["lines"]}
        assert payload["suggestion"] == "fix it"


class TestSubclasses:
    def test_validation_family_shares_code(self) -> None:
        errors = [
            MissingParameterError(parameter="lines"),
            ContentRequiredError(operation="insert"),
            InvalidParameterError(parameter="limit", value="x", expected="integer"),
        ]

        assert all(isinstance(error, ValidationError) for error in errors)
        assert {error.error_code for error in errors} == {ErrorCode.VALIDATION_ERROR}

    def test_parameter_details_serialized(self) -> None:
        payload = InvalidParameterError(parameter="limit", value="x", expected="integer").to_dict()

        assert payload["parameter"] == "limit"
        assert payload["value"] == "'x'"
        assert payload["expected"] == "integer"

    def test_line_locked_message_lists_numbers(self) -> None:
        error = LineLockedError.for_lines([2, 5])

        assert error.error_code == ErrorCode.LINE_LOCKED
        assert error.message == "Cannot edit locked lines: 2, 5"
        assert error.to_dict()["locked_lines"] == [2, 5]

    def test_unknown_operation_and_tool(self) -> None:
        operation = UnknownOperationError(message="Unknown operation: move", operation="move")
        tool = UnknownToolError(message="Unknown tool: doc_move", tool_name="doc_move")

        assert operation.to_dict()["operation"] == "move"
        assert tool.error_code == ErrorCode.UNKNOWN_TOOL
        assert tool.to_dict()["tool_name"] == "doc_move"
