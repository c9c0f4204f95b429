"""Shared typing contracts for the model-calling layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Sequence


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class ToolCallRequest:
    """A tool invocation requested by the model."""

    name: str
    arguments: Mapping[str, Any] | str = field(default_factory=dict)
    id: str | None = None


@dataclass(slots=True)
class AIResponse:
    """Text and tool calls returned by one model completion."""

    text: str = ""
    tool_calls: Sequence[ToolCallRequest] = field(default_factory=tuple)
    finish_reason: str | None = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class ActionType(str, Enum):
    """Kinds of document actions recorded during a chat turn."""

    SEARCH = "search"
    READ = "read"
    EDIT = "edit"

    @classmethod
    def for_tool(cls, tool_name: str) -> ActionType | None:
        try:
            return cls(tool_name.removeprefix("doc_"))
        except ValueError:
            return None


@dataclass(slots=True)
class Action:
    """Record of one executed tool call, shown to the user alongside the reply."""

    type: ActionType
    success: bool
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)

    def as_payload(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "success": self.success,
            "details": dict(self.details),
            "timestamp": self.timestamp.isoformat(),
        }


__all__ = ["AIResponse", "Action", "ActionType", "ToolCallRequest"]
