import logging

import pytest

from fixtures_docs import (
    build_docx_bytes,
    build_pdf_bytes,
    build_xlsx_bytes,
    build_zero_page_pdf_bytes,
)

from document_converter.config import ConversionLimits, ConverterConfig
from document_converter.handler import DocumentConverter


@pytest.fixture
def converter() -> DocumentConverter:
    return DocumentConverter()


@pytest.fixture
def tight_limits() -> ConversionLimits:
    return ConversionLimits(max_pages=2, max_rows=3, max_sheets=1, max_paragraphs=2)


@pytest.fixture
def tight_converter(tight_limits) -> DocumentConverter:
    return DocumentConverter(config=ConverterConfig(limits=tight_limits))


@pytest.fixture
def docx_bytes() -> bytes:
    return build_docx_bytes(
        ["Intro paragraph", "", "Second paragraph"],
        table_rows=[["Name", "Qty"], ["Apple", "3"]],
        trailing=["Closing words"],
        header_text="Page header",
    )


@pytest.fixture
def xlsx_bytes() -> bytes:
    return build_xlsx_bytes(
        {
            "Sheet1": [["name", "qty"], ["apple", 3]],
            "Totals": [["total", 3.0], [None, None]],
        }
    )


@pytest.fixture
def pdf_bytes() -> bytes:
    return build_pdf_bytes(["First page text", "", "Third page text"])


@pytest.fixture
def zero_page_pdf_bytes() -> bytes:
    return build_zero_page_pdf_bytes()


@pytest.fixture(autouse=True)
def _quiet_pdf_engine():
    # MuPDF reports repair attempts on broken inputs to stderr
    import fitz

    fitz.TOOLS.mupdf_display_errors(False)
    yield
    fitz.TOOLS.mupdf_display_errors(True)


@pytest.fixture
def caplog_info(caplog):
    caplog.set_level(logging.INFO, logger="document_converter")
    return caplog
