"""Tests for the high-level API."""

import pytest

import document_converter
from document_converter import (
    ConversionLimits,
    ConverterConfig,
    ErrorContent,
    RowsContent,
    TextContent,
    convert,
    convert_batch,
    convert_document,
    flatten,
)


def test_convert_and_flatten():
    record = convert("notes.txt", b"Hello world\n\nBye")
    assert flatten(record) == "paragraph_index,text\r\n0,Hello world\r\n1,\r\n2,Bye\r\n"


def test_convert_with_config():
    config = ConverterConfig(limits=ConversionLimits(max_rows=1))
    record = convert("data.csv", b"a\nb\n", config=config)
    assert record.content == RowsContent((("a",),))


def test_convert_batch():
    records = convert_batch([("a.txt", b"x"), ("b.bin", b"\x00\x01")])
    assert records[0].content == TextContent(("x",))
    assert records[1].content == ErrorContent("Unsupported file type")


class TestConvertDocument:
    def test_from_path(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_bytes(b"a,b\n1,2\n")
        record = convert_document(file_path=str(path))
        assert record.filename == "data.csv"
        assert record.content == RowsContent((("a", "b"), ("1", "2")))

    def test_from_bytes(self):
        record = convert_document(file_bytes=b"hi", file_name="hi.txt")
        assert record.content == TextContent(("hi",))

    def test_empty_bytes_are_accepted(self):
        record = convert_document(file_bytes=b"", file_name="empty.txt")
        assert record.content == TextContent(())

    def test_requires_a_source(self):
        with pytest.raises(ValueError, match="Must provide"):
            convert_document()

    def test_rejects_both_sources(self, tmp_path):
        with pytest.raises(ValueError, match="not both"):
            convert_document(file_path=str(tmp_path / "x.txt"), file_bytes=b"x")

    def test_bytes_need_a_name(self):
        with pytest.raises(ValueError, match="file_name is required"):
            convert_document(file_bytes=b"x")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="File not found"):
            convert_document(file_path=str(tmp_path / "missing.pdf"))


def test_limits_reject_negative_values():
    with pytest.raises(ValueError, match="max_rows"):
        ConversionLimits(max_rows=-1)


def test_public_exports():
    for name in document_converter.__all__:
        assert hasattr(document_converter, name), name
