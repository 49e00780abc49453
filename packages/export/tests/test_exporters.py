"""Tests for the CSV and console exporters."""

import pytest
from rich.console import Console

from prharvest_export.console import ConsoleExporter
from prharvest_export.csv_file import CsvExporter, escape, render
from prharvest_export.errors import ExportError
from prharvest_export.models import CommentRow, ExportData, HeaderRow


def _data(**row_overrides):
    row = CommentRow(
        url="https://example.com/pr/1#c1",
        reviewer_comment="一行目\n二行目",
        reviewer="rev",
        reviewee_comment="対応しました",
        reviewee="author",
        resolved=True,
        has_resolved_status=True,
    )
    for key, value in row_overrides.items():
        setattr(row, key, value)
    return ExportData(
        header=HeaderRow(additions=12, deletions=3, review_date="2023/4/14", start_time="9:00", end_time="11:30", duration_minutes="30"),
        rows=[row],
    )


# ---------------------------------------------------------------------------
# escape / render
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Hello World", "Hello World"),
        ("改行を含む\nコメント", "改行を含む\\nコメント"),
        ("エスケープ済みの場合\\nのコメント", "エスケープ済みの場合\\\\nのコメント"),
        ("crlf\r\nline", "crlf\\nline"),
        ("", ""),
    ],
)
def test_escape(text, expected):
    assert escape(text) == expected


def test_render_rows_end_with_crlf():
    text = render(_data())
    lines = text.split("\r\n")
    assert lines[0] == "12,3,2023/4/14,9:00,11:30,30"
    assert lines[1] == "https://example.com/pr/1#c1,一行目\\n二行目,rev,対応しました,author,true,true"
    assert lines[2] == ""


def test_render_quotes_commas_and_quotes():
    text = render(_data(reviewer_comment='a, "b"', resolved=False, has_resolved_status=False))
    assert '"a, ""b"""' in text
    assert text.split("\r\n")[1].endswith(",false,false")


def test_render_empty_session():
    text = render(ExportData())
    assert text == "0,0,,,,\r\n"


# ---------------------------------------------------------------------------
# CsvExporter
# ---------------------------------------------------------------------------


class TestCsvExporter:
    def test_writes_shift_jis(self, tmp_path):
        path = tmp_path / "out.csv"
        CsvExporter(str(path), use_sjis=True).write(_data())
        raw = path.read_bytes()
        assert "対応しました".encode("cp932") in raw
        assert raw.decode("cp932").startswith("12,3,")

    def test_writes_utf8(self, tmp_path):
        path = tmp_path / "out.csv"
        CsvExporter(str(path), use_sjis=False).write(_data())
        assert "対応しました" in path.read_bytes().decode("utf-8")

    def test_emoji_rejected_in_shift_jis(self, tmp_path):
        path = tmp_path / "out.csv"
        with pytest.raises(ExportError, match="Shift_JIS"):
            CsvExporter(str(path), use_sjis=True).write(_data(reviewer_comment="LGTM 👍"))
        assert not path.exists()

    def test_emoji_allowed_in_utf8(self, tmp_path):
        path = tmp_path / "out.csv"
        CsvExporter(str(path), use_sjis=False).write(_data(reviewer_comment="LGTM 👍"))
        assert "👍" in path.read_text(encoding="utf-8")

    def test_unwritable_path(self, tmp_path):
        with pytest.raises(ExportError, match="Could not write"):
            CsvExporter(str(tmp_path), use_sjis=False).write(_data())


# ---------------------------------------------------------------------------
# ConsoleExporter
# ---------------------------------------------------------------------------


class TestConsoleExporter:
    def _render(self, data):
        console = Console(record=True, width=200)
        ConsoleExporter(console=console, title="Review comments").write(data)
        return console.export_text()

    def test_prints_header_and_rows(self):
        out = self._render(_data())
        assert "2023/4/14" in out
        assert "rev" in out
        assert "対応しました" in out
        assert "resolved" in out

    def test_no_resolution_status(self):
        out = self._render(_data(has_resolved_status=False, resolved=False))
        assert "n/a" in out

    def test_markup_in_comments_shown_literally(self):
        out = self._render(_data(reviewer_comment="use [bold]x[/bold]"))
        assert "[bold]x[/bold]" in out

    def test_no_rows(self):
        out = self._render(ExportData())
        assert "No review comments found." in out
