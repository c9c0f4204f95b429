"""Shared test helpers and stub classes."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Iterable, Mapping, Sequence

from docline.ai.ai_types import AIResponse
from docline.documents.model import Document


def build_document(
    texts: Sequence[str],
    *,
    locked: Iterable[int] = (),
    pages: Sequence[int] | None = None,
    lines_per_page: int = 50,
    document_id: str = "doc-1",
) -> Document:
    """Create a store from ``texts`` with optional locks and explicit page tags."""

    document = Document.from_texts(texts, lines_per_page=lines_per_page, document_id=document_id)
    for number in locked:
        document.lines[number - 1].is_locked = True
    if pages is not None:
        for line, page in zip(document.lines, pages):
            line.page_number = page
        document.metadata.total_pages = max(pages, default=0)
    return document


def numbers(document: Document) -> list[int]:
    return [line.line_number for line in document.lines]


def texts(document: Document) -> list[str]:
    return [line.text for line in document.lines]


class MockTelemetry:
    """Collects emitted telemetry events."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((event_name, dict(payload)))


class ScriptedChatModel:
    """Chat model stub returning queued responses and recording each request."""

    def __init__(self, responses: Sequence[AIResponse]) -> None:
        self._responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def complete(self, messages, *, tools=None, temperature=None, max_tokens=None) -> AIResponse:
        self.calls.append(
            {
                "messages": [dict(message) for message in messages],
                "tools": tools,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if not self._responses:
            raise AssertionError("No scripted response left")
        return self._responses.pop(0)


def completion(content: str | None = None, tool_calls: Sequence[tuple[str, str, str]] = ()) -> SimpleNamespace:
    """Build an object shaped like an OpenAI chat completion."""

    calls = [
        SimpleNamespace(id=call_id, type="function", function=SimpleNamespace(name=name, arguments=arguments))
        for call_id, name, arguments in tool_calls
    ]
    message = SimpleNamespace(content=content, tool_calls=calls or None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason="stop")])
