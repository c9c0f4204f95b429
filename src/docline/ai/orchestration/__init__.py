"""Request-level orchestration: tool dispatch and chat turns."""

from .chat_turn import ChatTurnRunner, TurnResult
from .tool_dispatcher import DispatchListener, DispatchResult, ToolDispatcher

__all__ = [
    "ChatTurnRunner",
    "DispatchListener",
    "DispatchResult",
    "ToolDispatcher",
    "TurnResult",
]
