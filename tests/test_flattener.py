"""Tests for CSV flattening."""

import csv
import io

import pytest

from document_converter.builder import build, build_error
from document_converter.flattener import flatten
from document_converter.models import (
    FormatTag,
    RowsContent,
    SheetsContent,
    StructuredRecord,
    TextContent,
)


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text, newline="")))


class TestRows:
    def test_minimal_quoting(self):
        record = build("data.csv", FormatTag.CSV, RowsContent((("a", "b"), ("1", "2"), ("3", "x,y"))))
        assert flatten(record) == 'a,b\r\n1,2\r\n3,"x,y"\r\n'

    def test_quotes_and_newlines_are_escaped(self):
        record = build(
            "data.csv",
            FormatTag.CSV,
            RowsContent((('say "hi"', "line1\nline2", "cr\rhere", "plain"),)),
        )
        assert flatten(record) == '"say ""hi""","line1\nline2","cr\rhere",plain\r\n'

    def test_ragged_rows_are_emitted_verbatim(self):
        rows = (("a", "b", "c"), ("1",), ("2", "3"))
        record = build("data.csv", FormatTag.CSV, RowsContent(rows))
        assert flatten(record) == "a,b,c\r\n1\r\n2,3\r\n"

    def test_round_trip(self):
        rows = (("id", "note"), ("1", 'a "quoted", multi\nline value'), ("2", ""))
        record = build("data.csv", FormatTag.CSV, RowsContent(rows))
        assert _parse(flatten(record)) == [list(row) for row in rows]

    def test_no_rows(self):
        assert flatten(build("empty.csv", FormatTag.CSV, RowsContent(()))) == ""


class TestSheets:
    def test_sheets_separated_by_blank_row(self):
        content = SheetsContent(
            (
                ("First", (("a", "b"), ("1", "2"))),
                ("Second, too", (("c",),)),
            )
        )
        record = build("book.xlsx", FormatTag.SPREADSHEET, content)
        assert flatten(record) == 'First\r\na,b\r\n1,2\r\n\r\n"Second, too"\r\nc\r\n'

    def test_single_sheet_has_no_separator(self):
        content = SheetsContent((("Only", (("x",),)),))
        record = build("book.xlsx", FormatTag.SPREADSHEET, content)
        assert flatten(record) == "Only\r\nx\r\n"

    def test_no_sheets(self):
        assert flatten(build("book.xlsx", FormatTag.SPREADSHEET, SheetsContent(()))) == ""


class TestText:
    def test_indexed_paragraphs(self):
        record = build("notes.txt", FormatTag.PLAIN_TEXT, TextContent(("Hello world", "", "Bye, now")))
        assert flatten(record) == 'paragraph_index,text\r\n0,Hello world\r\n1,\r\n2,"Bye, now"\r\n'

    def test_empty_text_has_header_only(self):
        record = build("empty.pdf", FormatTag.PDF, TextContent(()))
        assert flatten(record) == "paragraph_index,text\r\n"


class TestError:
    def test_error_message_row(self):
        record = build_error("photo.png", FormatTag.UNKNOWN, "Unsupported file type")
        assert flatten(record) == "error\r\nUnsupported file type\r\n"

    def test_message_is_quoted_when_needed(self):
        record = build_error("x.pdf", FormatTag.PDF, 'bad "xref", line 2')
        assert _parse(flatten(record)) == [["error"], ['bad "xref", line 2']]


def test_flatten_is_deterministic():
    record = build(
        "book.xlsx",
        FormatTag.SPREADSHEET,
        SheetsContent((("S", (("a", "b,c"),)), ("T", (("d",),)))),
    )
    assert flatten(record) == flatten(record)


def test_unknown_content_type_is_rejected():
    record = StructuredRecord(filename="x", mime_type="text/plain", content=("raw",))
    with pytest.raises(TypeError):
        flatten(record)
