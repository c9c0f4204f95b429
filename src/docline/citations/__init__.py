"""Citation parsing and resolution."""

from .parser import Citation, CitationKind, parse_citations
from .resolver import describe_unresolved, format_citations_as_context, resolve_citations

__all__ = [
    "Citation",
    "CitationKind",
    "describe_unresolved",
    "format_citations_as_context",
    "parse_citations",
    "resolve_citations",
]
