"""Tests for the docline command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docline import app
from docline.ai.ai_types import AIResponse, ToolCallRequest
from docline.utils.file_io import load_document, save_document
from helpers import ScriptedChatModel, build_document, texts


@pytest.fixture
def cli(tmp_path: Path):
    base = ["--settings-path", str(tmp_path / "settings.json"), "--log-dir", str(tmp_path / "logs")]

    def run(*args: str) -> int:
        return app.main([*base, *args])

    return run


@pytest.fixture
def doc_path(tmp_path: Path) -> Path:
    path = tmp_path / "doc.json"
    save_document(build_document(["apple", "Banana", "cab"], locked=[1]), path)
    return path


class TestIngestAndExport:
    def test_ingest_markdown(self, cli, tmp_path: Path, capsys) -> None:
        source = tmp_path / "notes.md"
        source.write_text("\n".join(f"row {n}" for n in range(1, 8)), encoding="utf-8")

        code = cli("ingest", str(source), "--lines-per-page", "3")

        output = tmp_path / "notes.json"
        assert code == app.EXIT_OK
        assert capsys.readouterr().out.strip() == f"{output}: 7 lines, 3 pages"
        document = load_document(output)
        assert document.lines[6].page_number == 3
        assert document.metadata.file_name == "notes.md"

    def test_ingest_missing_file(self, cli, tmp_path: Path, capsys) -> None:
        code = cli("ingest", str(tmp_path / "absent.md"))

        assert code == app.EXIT_USAGE
        assert capsys.readouterr().err.startswith("error:")

    def test_export_to_stdout_and_file(self, cli, doc_path: Path, tmp_path: Path, capsys) -> None:
        assert cli("export", str(doc_path)) == app.EXIT_OK
        assert capsys.readouterr().out == "apple\nBanana\ncab\n"

        assert cli("export", str(doc_path), "-o", str(tmp_path / "out"), "--format", "text") == app.EXIT_OK
        assert (tmp_path / "out.txt").read_text(encoding="utf-8") == "apple\nBanana\ncab"


    def test_ingest_and_export_docx(self, cli, doc_path: Path, tmp_path: Path, capsys) -> None:
        assert cli("export", str(doc_path), "-o", str(tmp_path / "round"), "--format", "docx") == app.EXIT_OK
        capsys.readouterr()

        code = cli("ingest", str(tmp_path / "round.docx"), "-o", str(tmp_path / "round.json"))

        assert code == app.EXIT_OK
        document = load_document(tmp_path / "round.json")
        assert texts(document) == ["apple", "Banana", "cab"]
        assert document.metadata.format == "docx"

    def test_docx_export_needs_output(self, cli, doc_path: Path, capsys) -> None:
        assert cli("export", str(doc_path), "--format", "docx") == app.EXIT_USAGE
        assert "docx export requires --output" in capsys.readouterr().err

class TestToolCommands:
    def test_search(self, cli, doc_path: Path, capsys) -> None:
        assert cli("search", str(doc_path), "b") == app.EXIT_OK

        payload = json.loads(capsys.readouterr().out)
        assert [item["lineNumber"] for item in payload] == [2, 3]

    def test_read(self, cli, doc_path: Path, capsys) -> None:
        assert cli("read", str(doc_path), "3", "1", "9") == app.EXIT_OK

        payload = json.loads(capsys.readouterr().out)
        assert [line["text"] for line in payload["lines"]] == ["apple", "cab"]

    def test_edit_saves_document(self, cli, doc_path: Path, capsys) -> None:
        code = cli("edit", str(doc_path), "insert", "2", "--text", "Cherry")

        assert code == app.EXIT_OK
        assert json.loads(capsys.readouterr().out) == {"success": True, "modifiedLines": [2]}
        assert texts(load_document(doc_path)) == ["apple", "Banana", "Cherry", "cab"]

    def test_locked_edit_fails_and_does_not_save(self, cli, doc_path: Path, capsys) -> None:
        before = doc_path.read_text(encoding="utf-8")

        code = cli("edit", str(doc_path), "delete", "1", "2")

        captured = capsys.readouterr()
        assert code == app.EXIT_TOOL_FAILURE
        assert "doc_edit failed: Cannot edit locked lines: 1" in captured.err
        assert doc_path.read_text(encoding="utf-8") == before

    def test_telemetry_summary(self, cli, doc_path: Path, capsys) -> None:
        code = cli("--telemetry", "edit", str(doc_path), "delete", "1", "2")

        err = capsys.readouterr().err
        assert code == app.EXIT_TOOL_FAILURE
        assert "telemetry: 1 tool call(s), 1 failed" in err
        assert "tool.doc_edit line_locked" in err

    def test_no_telemetry_summary_by_default(self, cli, doc_path: Path, capsys) -> None:
        assert cli("read", str(doc_path), "1") == app.EXIT_OK
        assert "telemetry:" not in capsys.readouterr().err

    def test_cite_huge_range(self, cli, doc_path: Path, capsys) -> None:
        assert cli("cite", str(doc_path), "@l2-2000000000") == app.EXIT_OK
        assert capsys.readouterr().out == "Line 2: Banana\nLine 3: cab\n"

    def test_replace_without_text(self, cli, doc_path: Path, capsys) -> None:
        code = cli("edit", str(doc_path), "replace", "2")

        assert code == app.EXIT_TOOL_FAILURE
        assert "New text is required for replace operation" in capsys.readouterr().err

    def test_cite(self, cli, doc_path: Path, capsys) -> None:
        assert cli("cite", str(doc_path), "see @l2-3 and @p4") == app.EXIT_OK

        captured = capsys.readouterr()
        assert captured.out == "Line 2: Banana\nLine 3: cab\n"
        assert captured.err.strip() == "@p4 does not match any lines"

    def test_corrupt_document(self, cli, tmp_path: Path, capsys) -> None:
        path = tmp_path / "bad.json"
        path.write_text("[]", encoding="utf-8")

        assert cli("read", str(path), "1") == app.EXIT_USAGE
        assert "error:" in capsys.readouterr().err


class TestLockCommands:
    def test_lock_blocks_later_edits(self, cli, doc_path: Path, capsys) -> None:
        assert cli("lock", str(doc_path), "3", "2") == app.EXIT_OK
        assert capsys.readouterr().out.strip() == "locked: 2, 3"

        document = load_document(doc_path)
        assert [line.is_locked for line in document.lines] == [True, True, True]
        assert texts(document) == ["apple", "Banana", "cab"]
        assert cli("edit", str(doc_path), "replace", "3", "--text", "x") == app.EXIT_TOOL_FAILURE

    def test_unlock_allows_edits(self, cli, doc_path: Path, capsys) -> None:
        assert cli("unlock", str(doc_path), "1") == app.EXIT_OK
        assert capsys.readouterr().out.strip() == "unlocked: 1"

        assert cli("edit", str(doc_path), "delete", "1") == app.EXIT_OK
        assert texts(load_document(doc_path)) == ["Banana", "cab"]

    def test_missing_lines_are_reported(self, cli, doc_path: Path, capsys) -> None:
        code = cli("lock", str(doc_path), "2", "7")

        captured = capsys.readouterr()
        assert code == app.EXIT_TOOL_FAILURE
        assert captured.out.strip() == "locked: 2"
        assert captured.err.strip() == "no such line(s): 7"
        assert load_document(doc_path).lines[1].is_locked


class TestChat:
    def test_requires_api_key(self, cli, doc_path: Path, capsys) -> None:
        assert cli("chat", str(doc_path), "hello") == app.EXIT_USAGE
        assert "no API key configured" in capsys.readouterr().err

    def test_chat_applies_edits(self, cli, doc_path: Path, monkeypatch, capsys) -> None:
        model = ScriptedChatModel(
            [
                AIResponse(
                    tool_calls=(
                        ToolCallRequest(
                            name="doc_edit",
                            arguments={"operation": "replace", "lines": [3], "newText": "Cabbage"},
                        ),
                    )
                ),
                AIResponse(text="Line 3 now reads Cabbage."),
            ]
        )
        model.aclose = _noop_close
        monkeypatch.setenv("DOCLINE_API_KEY", "sk-test")
        monkeypatch.setattr(app, "AIClient", lambda settings: model)

        code = cli("chat", str(doc_path), "rename @l3")

        assert code == app.EXIT_OK
        assert capsys.readouterr().out.strip() == "Line 3 now reads Cabbage."
        assert texts(load_document(doc_path)) == ["apple", "Banana", "Cabbage"]


async def _noop_close() -> None:
    return None
