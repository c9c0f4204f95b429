"""Prompt templates for the document editing assistant."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from ..documents.model import Document

LOGGER = logging.getLogger(__name__)

TOOL_RESULTS_HEADER = "Tool execution results:"
TOOL_RESULTS_FOOTER = "Please provide a natural response to the user based on these results."


def build_system_prompt(document: Document | None = None, *, search_default_limit: int = 5) -> str:
    """Generate the system prompt, with a summary of ``document`` when given."""

    prompt = f"""{_personality_section()}

## Available Tools

You have access to these tools:

1. **doc_search(query)** - Search for lines containing specific keywords
   - Returns up to {search_default_limit} most relevant lines with line numbers
   - Use this when you need to find specific content

2. **doc_read(lines)** - Read specific lines by their line numbers
   - Takes an array of line numbers: [5, 10, 15]
   - Returns the exact content of those lines

3. **doc_edit(operation, lines, newText)** - Edit document lines
   - Operations: 'replace', 'insert', 'delete'
   - A replace writes the same newText to every listed line
   - IMPORTANT: Cannot edit locked lines
   - Always verify line numbers before editing

## Citation Syntax

{_citation_section()}

## Guidelines

{_guidelines_section()}"""

    if document is not None:
        prompt += f"""

## Current Document

{_document_section(document)}"""
    return prompt


def _personality_section() -> str:
    return (
        "You are an intelligent document editing assistant with the ability to search, read, "
        "and edit documents. Your goal is to help users edit their documents efficiently and accurately."
    )


def _citation_section() -> str:
    return """Users can reference specific parts of the document using:
- @line10 or @l10 - Reference line 10
- @l5-10 - Reference lines 5 through 10
- @page3 or @p3 - Reference all lines on page 3

When users use citations, the referenced content will be automatically included in the context."""


def _guidelines_section() -> str:
    return """1. **Always verify before editing** - Use doc_read to check content before making changes
2. **Respect locked lines** - Never attempt to edit locked lines
3. **Be precise** - Use exact line numbers when editing
4. **Confirm changes** - Tell users what you changed
5. **Handle errors gracefully** - If a tool fails, explain why and suggest alternatives

Line numbers shift after inserts and deletes; re-read before a second structural edit.
For large edits, process in smaller batches."""


def _document_section(document: Document) -> str:
    metadata = document.metadata
    return (
        f"- Format: {metadata.format.upper()}\n"
        f"- Total Lines: {metadata.total_lines}\n"
        f"- Total Pages: {metadata.total_pages}\n"
        f"- File: {metadata.file_name or 'Untitled'}"
    )


def build_prompt_with_context(
    message: str,
    citation_context: str = "",
    document: Document | None = None,
) -> str:
    """Compose the user turn: document summary, resolved citations, then the request."""

    parts: list[str] = []
    if document is not None:
        metadata = document.metadata
        parts.append(
            f"Document: {metadata.file_name or 'Untitled'} "
            f"({metadata.total_lines} lines, {metadata.total_pages} pages)"
        )
    if citation_context:
        parts.append(citation_context)
    parts.append(f"User request: {message}")
    return "\n\n".join(parts)


def format_tool_result(tool_name: str, payload: Any) -> str:
    """Render a tool envelope as plain text for the follow-up model call."""

    if tool_name == "doc_search":
        if isinstance(payload, list) and payload:
            rows = "\n".join(f"Line {item['lineNumber']}: {item['text']}" for item in payload)
            return f"Search results:\n{rows}"
        return "No results found"

    if tool_name == "doc_read":
        if isinstance(payload, dict) and payload.get("success"):
            rows = "\n".join(f"Line {line['lineNumber']}: {line['text']}" for line in payload.get("lines", []))
            return f"Lines read:\n{rows}"
        error = payload.get("error") if isinstance(payload, dict) else None
        return f"Error: {error or 'Could not read lines'}"

    if tool_name == "doc_edit":
        if isinstance(payload, dict) and payload.get("success"):
            modified = ", ".join(str(number) for number in payload.get("modifiedLines", []))
            return f"Successfully edited lines: {modified}"
        error = payload.get("error") if isinstance(payload, dict) else None
        return f"Edit failed: {error or 'Unknown error'}"

    try:
        return json.dumps(payload)
    except (TypeError, ValueError):
        LOGGER.debug("Could not serialize result for %s", tool_name, exc_info=True)
        return "Error formatting result"


def build_tool_results_prompt(formatted_results: Sequence[str]) -> str:
    body = "\n\n".join(formatted_results)
    return f"{TOOL_RESULTS_HEADER}\n\n{body}\n\n{TOOL_RESULTS_FOOTER}"


def build_error_message(error: BaseException | str) -> str:
    message = str(error)
    return f"I encountered an error: {message}. Please try again or rephrase your request."


def build_edit_success_message(operation: str, line_numbers: Sequence[int]) -> str:
    """Summarize a successful edit for the user."""

    noun = "line" if len(line_numbers) == 1 else "lines"
    numbers = ", ".join(str(number) for number in line_numbers)
    if operation == "replace":
        return f"Successfully replaced {noun} {numbers}"
    if operation == "insert":
        return f"Successfully inserted new content after {noun} {numbers}"
    if operation == "delete":
        return f"Successfully deleted {noun} {numbers}"
    return f"Successfully performed {operation} on {noun} {numbers}"


__all__ = [
    "build_edit_success_message",
    "build_error_message",
    "build_prompt_with_context",
    "build_system_prompt",
    "build_tool_results_prompt",
    "format_tool_result",
]
