"""Tests for CLI commands (F4)."""

import re

import pytest
from typer.testing import CliRunner

from ebookkit.cli import commands
from ebookkit.cli.commands import app

runner = CliRunner()

TEXT = "Harbor Log\n\nShips came in at dawn.\n\nThe fog lifted by nine."


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Run each command inside an isolated working directory."""
    monkeypatch.chdir(tmp_path)
    book = tmp_path / "Harbor Log.txt"
    book.write_text(TEXT, encoding="utf-8")
    return tmp_path


def _imported_id(output: str) -> str:
    match = re.search(r"ebook-\d+-[0-9a-f]{9}", output)
    assert match, output
    return match.group(0)


class TestConvertCommand:
    """Tests for ebookkit convert."""

    def test_convert_all_formats(self, workspace):
        """convert writes every export format."""
        out = workspace / "out"

        result = runner.invoke(app, ["convert", "Harbor Log.txt", "--out", str(out)])

        assert result.exit_code == 0, result.output
        names = sorted(p.name for p in out.iterdir())
        assert names == ["Harbor_Log.doc", "Harbor_Log.html", "Harbor_Log.pptx", "Harbor_Log.txt"]

    def test_convert_single_format(self, workspace):
        out = workspace / "out"

        result = runner.invoke(app, ["convert", "Harbor Log.txt", "-f", "docx", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert [p.name for p in out.iterdir()] == ["Harbor_Log.doc"]

    def test_convert_does_not_touch_library(self, workspace):
        runner.invoke(app, ["convert", "Harbor Log.txt", "-f", "docx", "-o", "out"])
        result = runner.invoke(app, ["list"])
        assert "No ebooks" in result.output

    def test_convert_print_triggers_print(self, workspace, monkeypatch):
        """--print hands the PDF export to the print trigger."""
        calls = []

        def fake_trigger(bundle, directory):
            calls.append(bundle.html.file_name)
            return True

        monkeypatch.setattr(commands, "trigger_print", fake_trigger)

        result = runner.invoke(app, ["convert", "Harbor Log.txt", "-f", "pdf", "--print", "-o", "out"])

        assert result.exit_code == 0, result.output
        assert calls == ["Harbor_Log.html"]

    def test_convert_rejects_unsupported_file(self, workspace):
        """Unsupported uploads exit with code 1."""
        (workspace / "report.docx").write_bytes(b"PK")

        result = runner.invoke(app, ["convert", "report.docx"])

        assert result.exit_code == 1
        assert "invalid file type" in result.output

    def test_convert_empty_file_fails(self, workspace):
        (workspace / "empty.txt").write_bytes(b"")
        result = runner.invoke(app, ["convert", "empty.txt"])
        assert result.exit_code == 1
        assert "file is empty" in result.output

    def test_convert_missing_file(self, workspace):
        result = runner.invoke(app, ["convert", "nowhere.pdf"])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_convert_unknown_format(self, workspace):
        result = runner.invoke(app, ["convert", "Harbor Log.txt", "-f", "odt"])
        assert result.exit_code == 1
        assert "Unknown format" in result.output


class TestLibraryCommands:
    """Tests for import, list, export and remove."""

    def test_import_then_list(self, workspace):
        """Imported ebooks show up in list."""
        result = runner.invoke(app, ["import", "Harbor Log.txt"])
        assert result.exit_code == 0, result.output
        ebook_id = _imported_id(result.output)

        listing = runner.invoke(app, ["list"])

        assert listing.exit_code == 0
        assert ebook_id in listing.output
        assert "ready" in listing.output

    def test_export_by_prefix(self, workspace):
        """export accepts a unique id prefix."""
        ebook_id = _imported_id(runner.invoke(app, ["import", "Harbor Log.txt"]).output)
        out = workspace / "exports"

        result = runner.invoke(app, ["export", ebook_id[:-3], "-f", "ppt", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert (out / "Harbor_Log.pptx").exists()

    def test_export_unknown_id(self, workspace):
        result = runner.invoke(app, ["export", "ebook-missing"])
        assert result.exit_code == 1
        assert "No ebook found" in result.output

    def test_remove(self, workspace):
        """remove --yes deletes the ebook."""
        ebook_id = _imported_id(runner.invoke(app, ["import", "Harbor Log.txt"]).output)

        result = runner.invoke(app, ["remove", ebook_id, "--yes"])

        assert result.exit_code == 0
        assert "removed" in result.output
        assert "No ebooks" in runner.invoke(app, ["list"]).output

    def test_remove_cancelled(self, workspace):
        """Answering no keeps the ebook."""
        ebook_id = _imported_id(runner.invoke(app, ["import", "Harbor Log.txt"]).output)

        result = runner.invoke(app, ["remove", ebook_id], input="n\n")

        assert "Cancelled" in result.output
        assert ebook_id in runner.invoke(app, ["list"]).output
