"""Declarative registry for the document tools.

Holds the JSON-schema definitions shown to the model alongside the tool
objects that implement them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from .base import BaseTool
from .doc_edit import DocEditTool
from .doc_read import DocReadTool
from .doc_search import DEFAULT_LIMIT, MAX_LIMIT, DocSearchTool

LOGGER = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Tool Schema Types
# -----------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class ParameterSchema:
    """Schema for a single tool parameter.

    Attributes:
        name: Parameter name.
        type: JSON Schema type (string, integer, array).
        description: Human-readable description.
        required: Whether the parameter is required.
        default: Default value if not provided.
        enum: List of allowed values.
        items: Schema for array items.
    """

    name: str
    type: str
    description: str
    required: bool = False
    default: Any = None
    enum: Sequence[Any] | None = None
    items: "ParameterSchema" | None = None

    def to_json_schema(self) -> dict[str, Any]:
        """Convert to JSON Schema format."""
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.items:
            schema["items"] = self.items.to_json_schema()
        return schema


@dataclass(slots=True)
class ToolSchema:
    """Complete schema for a tool.

    Attributes:
        name: Tool name (identifier).
        description: Description shown to the model.
        parameters: List of parameters.
    """

    name: str
    description: str
    parameters: Sequence[ParameterSchema] = field(default_factory=list)

    def to_json_schema(self) -> dict[str, Any]:
        """Convert to the JSON Schema object used for function calling and validation."""
        properties: dict[str, Any] = {}
        required: list[str] = []

        for param in self.parameters:
            properties[param.name] = param.to_json_schema()
            if param.required:
                required.append(param.name)

        schema: dict[str, Any] = {
            "type": "object",
            "properties": properties,
            "additionalProperties": False,
        }
        if required:
            schema["required"] = required
        return schema


# -----------------------------------------------------------------------------
# Tool Registry
# -----------------------------------------------------------------------------


class ToolRegistry:
    """Registry for document tools.

    Example:
        registry = ToolRegistry()
        registry.register(DocReadTool(), schema=DOC_READ_SCHEMA)
        tool = registry.get_tool("doc_read")
    """

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}
        self._schemas: dict[str, ToolSchema] = {}

    def register(self, tool: BaseTool, *, schema: ToolSchema) -> None:
        """Register ``tool`` under ``schema.name``; re-registering replaces the previous entry."""
        if tool.name and tool.name != schema.name:
            raise ValueError(f"Tool name {tool.name!r} does not match schema name {schema.name!r}")
        self._tools[schema.name] = tool
        self._schemas[schema.name] = schema
        LOGGER.debug("Registered tool: %s", schema.name)

    def get_tool(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def get_schema(self, name: str) -> ToolSchema | None:
        return self._schemas.get(name)

    def to_openai_tools(self) -> list[dict[str, Any]]:
        """Convert all tools to OpenAI function calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": schema.name,
                    "description": schema.description,
                    "parameters": schema.to_json_schema(),
                },
            }
            for schema in self._schemas.values()
        ]


# -----------------------------------------------------------------------------
# Schema Definitions
# -----------------------------------------------------------------------------

LINE_NUMBER_ITEM = ParameterSchema(name="line", type="integer", description="")


def doc_search_schema(*, default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT) -> ToolSchema:
    return ToolSchema(
        name=DocSearchTool.name,
        description=(
            "Search the document for lines containing specific keywords or phrases. "
            f"Returns up to {default_limit} most relevant lines with their line numbers."
        ),
        parameters=[
            ParameterSchema(
                name="query",
                type="string",
                description="The search query or keyword to find in the document",
                required=True,
            ),
            ParameterSchema(
                name="limit",
                type="integer",
                description=f"Maximum number of results to return (default: {default_limit}, max: {max_limit})",
                default=default_limit,
            ),
        ],
        )


DOC_READ_SCHEMA = ToolSchema(
    name=DocReadTool.name,
    description=(
        "Read specific lines from the document by their line numbers. "
        "Use this to get the exact content of lines."
    ),
    parameters=[
        ParameterSchema(
            name="lines",
            type="array",
            description="Array of line numbers to read (e.g., [5, 10, 15])",
            required=True,
            items=LINE_NUMBER_ITEM,
        ),
    ],
)

DOC_EDIT_SCHEMA = ToolSchema(
    name=DocEditTool.name,
    description=(
        "Edit lines in the document. Supports replace, insert, and delete operations. "
        "IMPORTANT: Cannot edit locked lines."
    ),
    parameters=[
        ParameterSchema(
            name="operation",
            type="string",
            description="The edit operation to perform",
            required=True,
            enum=["replace", "insert", "delete"],
        ),
        ParameterSchema(
            name="lines",
            type="array",
            description="Line numbers to edit",
            required=True,
            items=LINE_NUMBER_ITEM,
        ),
        ParameterSchema(
            name="newText",
            type="string",
            description="New text content (required for replace and insert operations)",
        ),
    ],
)


def build_default_registry(
    *,
    search_default_limit: int = DEFAULT_LIMIT,
    search_max_limit: int = MAX_LIMIT,
) -> ToolRegistry:
    """Return a registry holding ``doc_search``, ``doc_read`` and ``doc_edit``."""

    registry = ToolRegistry()
    registry.register(
        DocSearchTool(default_limit=search_default_limit, max_limit=search_max_limit),
        schema=doc_search_schema(default_limit=search_default_limit, max_limit=search_max_limit),
    )
    registry.register(DocReadTool(), schema=DOC_READ_SCHEMA)
    registry.register(DocEditTool(), schema=DOC_EDIT_SCHEMA)
    return registry


__all__ = [
    "DOC_EDIT_SCHEMA",
    "DOC_READ_SCHEMA",
    "ParameterSchema",
    "ToolRegistry",
    "ToolSchema",
    "build_default_registry",
    "doc_search_schema",
]
