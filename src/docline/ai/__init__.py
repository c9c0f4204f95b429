"""AI client, prompts, and tool wiring."""

from .ai_types import Action, ActionType, AIResponse, ToolCallRequest
from .client import AIClient, ClientSettings

__all__ = ["AIClient", "AIResponse", "Action", "ActionType", "ClientSettings", "ToolCallRequest"]
