"""Command line entry point for docline."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence

from .ai.client import AIClient
from .ai.orchestration.chat_turn import ChatTurnRunner, TurnResult
from .ai.orchestration.tool_dispatcher import DispatchResult, ToolDispatcher
from .ai.tools.tool_registry import build_default_registry
from .citations.parser import parse_citations
from .citations.resolver import describe_unresolved, format_citations_as_context, resolve_citations
from .documents.exporters import BINARY_FORMATS, EXPORT_SUFFIXES, export_markdown, export_to_path
from .documents.importers import (
    DocxImportHandler,
    FileImporter,
    ImporterError,
    MarkdownImportHandler,
    PDFImportHandler,
)
from .documents.model import Document, DocumentFormatError
from .services.settings import Settings, SettingsStore
from .services.telemetry import InMemoryTelemetrySink
from .utils.file_io import load_document, save_document
from .utils.logging import setup_logging

_LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TOOL_FAILURE = 1
EXIT_USAGE = 2


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point invoked by the ``docline`` console script."""

    parser = _build_parser()
    args = parser.parse_args(argv)

    settings_path = args.settings_path or os.environ.get("DOCLINE_SETTINGS_PATH")
    store = SettingsStore(Path(settings_path).expanduser() if settings_path else None)
    settings = store.load()

    debug = args.debug or settings.debug_logging
    setup_logging(logging.DEBUG if debug else logging.INFO, log_dir=args.log_dir, console=debug)

    args.telemetry_sink = InMemoryTelemetrySink() if args.telemetry else None
    try:
        return args.handler(args, settings)
    except (FileNotFoundError, ImporterError, DocumentFormatError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    finally:
        if args.telemetry_sink is not None:
            _report_telemetry(args.telemetry_sink)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docline",
        description="Search, read, cite and edit line-addressable documents.",
    )
    parser.add_argument("--settings-path", metavar="PATH", help="Override the default ~/.docline/settings.json path.")
    parser.add_argument("--log-dir", metavar="DIR", default=None, help="Directory for docline.log.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on stderr.")
    parser.add_argument(
        "--telemetry", action="store_true", help="Summarize tool calls and failures on stderr when done."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="Convert a markdown, text, PDF or DOCX file into a document JSON file.")
    ingest.add_argument("source", type=Path)
    ingest.add_argument("-o", "--output", type=Path, default=None, help="Defaults to SOURCE with a .json suffix.")
    ingest.add_argument("--lines-per-page", type=int, default=None)
    ingest.set_defaults(handler=_cmd_ingest)

    search = commands.add_parser("search", help="Keyword search (doc_search).")
    search.add_argument("document", type=Path)
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None)
    search.set_defaults(handler=_cmd_search)

    read = commands.add_parser("read", help="Read lines by number (doc_read).")
    read.add_argument("document", type=Path)
    read.add_argument("lines", type=int, nargs="+")
    read.set_defaults(handler=_cmd_read)

    edit = commands.add_parser("edit", help="Replace, insert after, or delete lines (doc_edit).")
    edit.add_argument("document", type=Path)
    edit.add_argument("operation", choices=("replace", "insert", "delete"))
    edit.add_argument("lines", type=int, nargs="+")
    edit.add_argument("--text", dest="new_text", default=None, help="Text for replace/insert.")
    edit.set_defaults(handler=_cmd_edit)

    toggles = (("lock", True, "Protect lines from doc_edit."), ("unlock", False, "Make locked lines editable again."))
    for name, locked, summary in toggles:
        toggle = commands.add_parser(name, help=summary)
        toggle.add_argument("document", type=Path)
        toggle.add_argument("lines", type=int, nargs="+")
        toggle.set_defaults(handler=_cmd_set_locked, locked=locked)

    cite = commands.add_parser("cite", help="Resolve @line/@l/@page/@p citations in a message.")
    cite.add_argument("document", type=Path)
    cite.add_argument("message")
    cite.set_defaults(handler=_cmd_cite)

    export = commands.add_parser("export", help="Write the document back out as markdown, text or DOCX.")
    export.add_argument("document", type=Path)
    export.add_argument("-o", "--output", type=Path, default=None, help="Defaults to stdout.")
    export.add_argument("--format", dest="fmt", choices=sorted(EXPORT_SUFFIXES), default="markdown")
    export.set_defaults(handler=_cmd_export)

    chat = commands.add_parser("chat", help="Send one message to the assistant; edits are saved back.")
    chat.add_argument("document", type=Path)
    chat.add_argument("message")
    chat.set_defaults(handler=_cmd_chat)
    return parser


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


def _cmd_ingest(args: argparse.Namespace, settings: Settings) -> int:
    lines_per_page = args.lines_per_page or settings.lines_per_page
    importer = FileImporter(
        (
            MarkdownImportHandler(lines_per_page=lines_per_page),
            PDFImportHandler(),
            DocxImportHandler(lines_per_page=lines_per_page),
        )
    )
    result = importer.import_file(args.source)
    output = args.output or args.source.with_suffix(".json")
    save_document(result.document, output)
    metadata = result.document.metadata
    print(f"{output}: {metadata.total_lines} lines, {metadata.total_pages} pages")
    return EXIT_OK


def _cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    arguments: dict[str, Any] = {"query": args.query}
    if args.limit is not None:
        arguments["limit"] = args.limit
    return _run_tool(args, settings, "doc_search", arguments)


def _cmd_read(args: argparse.Namespace, settings: Settings) -> int:
    return _run_tool(args, settings, "doc_read", {"lines": args.lines})


def _cmd_edit(args: argparse.Namespace, settings: Settings) -> int:
    arguments: dict[str, Any] = {"operation": args.operation, "lines": args.lines}
    if args.new_text is not None:
        arguments["newText"] = args.new_text
    return _run_tool(args, settings, "doc_edit", arguments, save=True)


def _cmd_set_locked(args: argparse.Namespace, settings: Settings) -> int:
    document = load_document(args.document)
    acted = document.set_locked(args.lines, locked=args.locked)
    missing = sorted(set(args.lines) - set(acted))
    if acted:
        save_document(document, args.document)
        _LOGGER.info("%s line(s) %s in %s", "Locked" if args.locked else "Unlocked", acted, args.document)
    state = "locked" if args.locked else "unlocked"
    print(f"{state}: {', '.join(str(n) for n in acted) or 'none'}")
    if missing:
        print(f"no such line(s): {', '.join(str(n) for n in missing)}", file=sys.stderr)
        return EXIT_TOOL_FAILURE
    return EXIT_OK


def _cmd_cite(args: argparse.Namespace, settings: Settings) -> int:
    document = load_document(args.document)
    citations = resolve_citations(parse_citations(args.message), document)
    context = format_citations_as_context(citations)
    if context:
        print(context)
    note = describe_unresolved(citations)
    if note:
        print(note, file=sys.stderr)
    return EXIT_OK


def _cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    document = load_document(args.document)
    if args.output is None:
        if args.fmt in BINARY_FORMATS:
            print(f"error: {args.fmt} export requires --output", file=sys.stderr)
            return EXIT_USAGE
        print(export_markdown(document))
        return EXIT_OK
    target = export_to_path(document, args.output, fmt=args.fmt)
    print(target)
    return EXIT_OK


def _cmd_chat(args: argparse.Namespace, settings: Settings) -> int:
    if not settings.api_key:
        print("error: no API key configured (set DOCLINE_API_KEY)", file=sys.stderr)
        return EXIT_USAGE
    document = load_document(args.document)
    try:
        result = asyncio.run(_chat_once(settings, document, args.message, telemetry=args.telemetry_sink))
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    if result.document_changed:
        save_document(document, args.document)
    if result.unresolved_note:
        print(result.unresolved_note, file=sys.stderr)
    print(result.message)
    return EXIT_OK


async def _chat_once(
    settings: Settings,
    document: Document,
    message: str,
    *,
    telemetry: InMemoryTelemetrySink | None = None,
) -> TurnResult:
    client = AIClient(settings.client_settings())
    runner = ChatTurnRunner(
        client,
        dispatcher=_build_dispatcher(settings, telemetry=telemetry),
        temperature=settings.temperature,
        max_output_tokens=settings.max_output_tokens,
        followup_max_output_tokens=settings.followup_max_output_tokens,
        search_default_limit=settings.search_default_limit,
    )
    try:
        return await runner.run_turn(message, document)
    finally:
        await client.aclose()


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _build_dispatcher(settings: Settings, *, telemetry: InMemoryTelemetrySink | None = None) -> ToolDispatcher:
    registry = build_default_registry(
        search_default_limit=settings.search_default_limit,
        search_max_limit=settings.search_max_limit,
    )
    return ToolDispatcher(registry=registry, telemetry=telemetry)


def _run_tool(
    args: argparse.Namespace,
    settings: Settings,
    tool_name: str,
    arguments: dict[str, Any],
    *,
    save: bool = False,
) -> int:
    path = args.document
    document = load_document(path)
    dispatcher = _build_dispatcher(settings, telemetry=args.telemetry_sink)
    result = dispatcher.dispatch(tool_name, arguments, document=document)
    _print_json(result.payload)
    if not result.success:
        _report_failure(result)
        return EXIT_TOOL_FAILURE
    if save:
        save_document(document, path)
        _LOGGER.info("Saved %s after %s", path, tool_name)
    return EXIT_OK


def _report_failure(result: DispatchResult) -> None:
    message = result.error.message if result.error else "unknown error"
    print(f"{result.tool_name} failed: {message}", file=sys.stderr)


def _report_telemetry(sink: InMemoryTelemetrySink) -> None:
    failures = sink.failures()
    print(f"telemetry: {len(sink)} tool call(s), {len(failures)} failed", file=sys.stderr)
    for event in failures:
        print(f"  {event.name} {event.error_code or 'error'} {event.duration_ms:.2f}ms", file=sys.stderr)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    raise SystemExit(main())
