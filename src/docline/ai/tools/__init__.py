"""Document tools exposed to the model."""

from . import doc_edit, doc_read, doc_search, errors, tool_registry, validation
from .doc_edit import DocEditTool
from .doc_read import DocReadTool
from .doc_search import DocSearchTool
from .tool_registry import ToolRegistry, build_default_registry

__all__ = [
    "DocEditTool",
    "DocReadTool",
    "DocSearchTool",
    "ToolRegistry",
    "build_default_registry",
    "doc_edit",
    "doc_read",
    "doc_search",
    "errors",
    "tool_registry",
    "validation",
]
