"""One user turn against a document: citations, model call, tools, follow-up."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence

from ...citations.parser import Citation, parse_citations
from ...citations.resolver import describe_unresolved, format_citations_as_context, resolve_citations
from ...documents.model import Document
from .. import prompts
from ..ai_types import Action, AIResponse
from .tool_dispatcher import DispatchResult, ToolDispatcher

LOGGER = logging.getLogger(__name__)

TOOLS_FALLBACK_REPLY = "I executed the requested operations."
EMPTY_FALLBACK_REPLY = "I received your message but could not generate a response."
TOOLS_PENDING_REPLY = "Executing tools..."


class ChatModel(Protocol):
    """The part of ``AIClient`` the runner depends on."""

    async def complete(
        self,
        messages: Sequence[Mapping[str, Any]],
        *,
        tools: Sequence[Mapping[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AIResponse:
        ...


@dataclass(slots=True)
class TurnResult:
    """Outcome of a chat turn."""

    message: str
    citations: list[Citation] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    document_changed: bool = False
    tool_results: list[DispatchResult] = field(default_factory=list)
    unresolved_note: str = ""

    def as_payload(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "citations": [citation.to_dict() for citation in self.citations],
            "actions": [action.as_payload() for action in self.actions],
            "documentChanged": self.document_changed,
        }


class ChatTurnRunner:
    """Drives a single request/response cycle.

    The document passed to ``run_turn`` is mutated in place by any edit the
    model requests, and is owned by this call until it returns.
    """

    def __init__(
        self,
        client: ChatModel,
        *,
        dispatcher: ToolDispatcher | None = None,
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
        followup_max_output_tokens: int = 1024,
        search_default_limit: int = 5,
    ) -> None:
        self._client = client
        self._dispatcher = dispatcher or ToolDispatcher()
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._followup_max_output_tokens = followup_max_output_tokens
        self._search_default_limit = search_default_limit

    async def run_turn(
        self,
        message: str,
        document: Document,
        history: Sequence[Mapping[str, str]] = (),
    ) -> TurnResult:
        if not message or not message.strip():
            raise ValueError("Message is required")
        if document is None:
            raise ValueError("Document is required")

        request_id = uuid.uuid4().hex
        citations = resolve_citations(parse_citations(message), document)
        LOGGER.info("Turn %s: %d citation(s) in message", request_id, len(citations))
        prompt = prompts.build_prompt_with_context(message, format_citations_as_context(citations), document)

        conversation: list[dict[str, Any]] = [
            {
                "role": "system",
                "content": prompts.build_system_prompt(document, search_default_limit=self._search_default_limit),
            },
            *_history_messages(history),
            {"role": "user", "content": prompt},
        ]
        response = await self._client.complete(
            conversation,
            tools=self._dispatcher.registry.to_openai_tools(),
            temperature=self._temperature,
            max_tokens=self._max_output_tokens,
        )

        result = TurnResult(
            message="",
            citations=citations,
            unresolved_note=describe_unresolved(citations),
        )
        if not response.has_tool_calls:
            result.message = response.text or EMPTY_FALLBACK_REPLY
            return result

        LOGGER.info("Turn %s: model requested %d tool call(s)", request_id, len(response.tool_calls))
        dispatched = self._dispatcher.dispatch_many(response.tool_calls, document=document, request_id=request_id)
        result.tool_results = dispatched
        result.actions = [item.action for item in dispatched if item.action is not None]
        result.document_changed = any(item.modified_document for item in dispatched)

        formatted = [prompts.format_tool_result(item.tool_name, item.payload) for item in dispatched]
        followup = await self._client.complete(
            [
                *conversation,
                {"role": "assistant", "content": TOOLS_PENDING_REPLY},
                {"role": "user", "content": prompts.build_tool_results_prompt(formatted)},
            ],
            temperature=self._temperature,
            max_tokens=self._followup_max_output_tokens,
        )
        result.message = followup.text or TOOLS_FALLBACK_REPLY
        return result


def _history_messages(history: Sequence[Mapping[str, str]]) -> list[dict[str, str]]:
    messages: list[dict[str, str]] = []
    for entry in history:
        role = "user" if entry.get("role") == "user" else "assistant"
        messages.append({"role": role, "content": str(entry.get("content", ""))})
    return messages


__all__ = ["ChatModel", "ChatTurnRunner", "TurnResult"]
