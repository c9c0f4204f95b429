"""Tool Dispatcher.

Routes named tool calls to the registered document tools, validates the
argument shape against each tool's JSON schema, and wraps every outcome in
a ``DispatchResult``. Nothing raised inside a tool escapes ``dispatch``.

Calls in one batch run strictly in order against the same ``Document``;
each call sees the mutations made by the previous one. The dispatcher does
no locking across requests, so callers sharing a document between
concurrent requests must serialize access themselves.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from ...documents.model import Document
from ..ai_types import Action, ActionType, ToolCallRequest
from ..tools.base import TelemetryEmitter, ToolContext, ToolResult
from ..tools.errors import ErrorCode, ToolError, UnknownToolError, ValidationError
from ..tools.tool_registry import ToolRegistry, ToolSchema, build_default_registry

LOGGER = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Dispatch Result
# -----------------------------------------------------------------------------


@dataclass(slots=True)
class DispatchResult:
    """Result of a tool dispatch operation.

    Attributes:
        success: Whether the tool executed successfully.
        tool_name: Name of the tool requested.
        payload: The tool's JSON envelope (search list, read or edit object).
        error: Error if execution failed.
        execution_time_ms: Wall time for validation plus execution.
        action: Record of the call for the chat transcript (None for unknown tools).
    """

    success: bool
    tool_name: str
    payload: Any
    error: ToolError | None = None
    execution_time_ms: float = 0.0
    action: Action | None = None
    call_id: str | None = None

    @property
    def modified_document(self) -> bool:
        return self.success and self.action is not None and self.action.type is ActionType.EDIT

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "tool_name": self.tool_name,
            "payload": self.payload,
            "execution_time_ms": self.execution_time_ms,
        }
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data


# -----------------------------------------------------------------------------
# Dispatch Listener
# -----------------------------------------------------------------------------


class DispatchListener(Protocol):
    """Callback protocol for dispatch events."""

    def on_tool_start(self, tool_name: str, arguments: Mapping[str, Any]) -> None:
        """Called when a tool starts execution."""
        ...

    def on_tool_complete(self, result: DispatchResult) -> None:
        """Called when a tool completes, successfully or not."""
        ...


# -----------------------------------------------------------------------------
# Tool Dispatcher
# -----------------------------------------------------------------------------


class ToolDispatcher:
    """Dispatches tool calls to registered document tools.

    Example:
        dispatcher = ToolDispatcher()
        result = dispatcher.dispatch("doc_search", {"query": "budget"}, document=doc)
    """

    def __init__(
        self,
        *,
        registry: ToolRegistry | None = None,
        listener: DispatchListener | None = None,
        telemetry: TelemetryEmitter | None = None,
    ) -> None:
        self._registry = registry or build_default_registry()
        self._listener = listener
        self._telemetry = telemetry
        self._validators: dict[str, Draft7Validator] = {}

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def set_listener(self, listener: DispatchListener | None) -> None:
        self._listener = listener

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        tool_name: str,
        arguments: Mapping[str, Any] | str | None,
        *,
        document: Document,
        request_id: str | None = None,
        call_id: str | None = None,
    ) -> DispatchResult:
        """Run one tool call against ``document`` and return its envelope."""
        start = time.perf_counter()

        try:
            params = _decode_arguments(arguments)
        except ValidationError as exc:
            params = {}
            decode_error: ToolError | None = exc
        else:
            decode_error = None

        self._notify_start(tool_name, params)

        tool = self._registry.get_tool(tool_name)
        schema = self._registry.get_schema(tool_name)
        if tool is None or schema is None:
            LOGGER.warning("Unknown tool requested: %s", tool_name)
            error = UnknownToolError(message=f"Unknown tool: {tool_name}", tool_name=tool_name)
            result = DispatchResult(
                success=False,
                tool_name=tool_name,
                payload={"error": error.message},
                error=error,
                execution_time_ms=_elapsed_ms(start),
                call_id=call_id,
            )
            self._notify_complete(result)
            return result

        params = _drop_unknown_arguments(tool_name, schema, params)
        error = decode_error or self._validate_shape(tool_name, schema.to_json_schema(), params)
        if error is not None:
            LOGGER.info("Rejected %s arguments: %s", tool_name, error.message)
            tool_result = ToolResult(success=False, error=error)
        else:
            context = ToolContext(document=document, telemetry=self._telemetry, request_id=request_id)
            tool_result = tool.run(context, params)

        result = DispatchResult(
            success=tool_result.success,
            tool_name=tool_name,
            payload=tool.to_payload(tool_result),
            error=tool_result.error,
            execution_time_ms=_elapsed_ms(start),
            call_id=call_id,
        )
        result.action = _build_action(tool_name, params, result)
        self._notify_complete(result)
        return result

    def dispatch_many(
        self,
        calls: Iterable[ToolCallRequest],
        *,
        document: Document,
        request_id: str | None = None,
    ) -> list[DispatchResult]:
        """Run ``calls`` one after another, in order, against the same document."""
        results: list[DispatchResult] = []
        for call in calls:
            results.append(
                self.dispatch(
                    call.name,
                    call.arguments,
                    document=document,
                    request_id=request_id,
                    call_id=call.id,
                )
            )
        return results

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_shape(
        self,
        tool_name: str,
        schema: Mapping[str, Any],
        params: Mapping[str, Any],
    ) -> ToolError | None:
        validator = self._validators.get(tool_name)
        if validator is None:
            validator = Draft7Validator(schema)
            self._validators[tool_name] = validator
        issue = best_match(validator.iter_errors(dict(params)))
        if issue is None:
            return None
        location = ".".join(str(part) for part in issue.absolute_path)
        prefix = f"{location}: " if location else ""
        return ValidationError(
            message=f"Invalid arguments for {tool_name}: {prefix}{issue.message}",
            details={"path": list(issue.absolute_path), "validator": issue.validator},
        )

    # ------------------------------------------------------------------
    # Listener plumbing
    # ------------------------------------------------------------------

    def _notify_start(self, tool_name: str, arguments: Mapping[str, Any]) -> None:
        if self._listener is None:
            return
        try:
            self._listener.on_tool_start(tool_name, arguments)
        except Exception:
            LOGGER.debug("Listener on_tool_start failed", exc_info=True)

    def _notify_complete(self, result: DispatchResult) -> None:
        if self._listener is None:
            return
        try:
            self._listener.on_tool_complete(result)
        except Exception:
            LOGGER.debug("Listener on_tool_complete failed", exc_info=True)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _decode_arguments(arguments: Mapping[str, Any] | str | None) -> dict[str, Any]:
    """Normalize raw arguments into a dict; JSON ``null`` values count as absent."""

    if arguments is None:
        return {}
    if isinstance(arguments, str):
        text = arguments.strip()
        if not text:
            return {}
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(message=f"Tool arguments are not valid JSON: {exc.msg}") from exc
        except RecursionError as exc:
            raise ValidationError(message="Tool arguments are nested too deeply") from exc
        arguments = decoded
    if not isinstance(arguments, Mapping):
        raise ValidationError(message="Tool arguments must be a JSON object")
    return {key: value for key, value in arguments.items() if value is not None}


def _drop_unknown_arguments(
    tool_name: str, schema: ToolSchema, params: dict[str, Any]
) -> dict[str, Any]:
    known = {param.name for param in schema.parameters}
    extra = sorted(key for key in params if key not in known)
    if not extra:
        return params
    LOGGER.debug("Ignoring unexpected %s argument(s): %s", tool_name, ", ".join(extra))
    return {key: value for key, value in params.items() if key in known}


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def _build_action(tool_name: str, params: Mapping[str, Any], result: DispatchResult) -> Action | None:
    action_type = ActionType.for_tool(tool_name)
    if action_type is None:
        return None
    if result.error is not None and result.error.error_code == ErrorCode.INTERNAL_ERROR:
        details: dict[str, Any] = {"error": result.error.message}
    elif action_type is ActionType.SEARCH:
        details = {"query": params.get("query"), "resultsCount": len(result.payload or [])}
    elif action_type is ActionType.READ:
        details = {"lines": params.get("lines"), "found": len(result.payload.get("lines", []))}
    else:
        details = {
            "operation": params.get("operation"),
            "lines": params.get("lines"),
            "modified": len(result.payload.get("modifiedLines", [])),
        }
    return Action(type=action_type, success=result.success, details=details)


__all__ = ["DispatchListener", "DispatchResult", "ToolDispatcher"]
