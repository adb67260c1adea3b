"""Per-format content extractors.

Each extractor turns a raw buffer into one content variant plus non-fatal
warnings. Malformed but parseable input degrades with a warning; input that
yields no usable content raises ``ExtractionError``.
"""

import csv
import datetime
import io
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

import fitz  # PyMuPDF
import xlrd
from bs4 import BeautifulSoup
from docx import Document
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph
from openpyxl import load_workbook

from document_converter.config import ConversionLimits
from document_converter.detector import OLE_SIGNATURE, ZIP_SIGNATURE
from document_converter.exceptions import (
    DecodingError,
    ExtractionError,
    UnsupportedTypeError,
)
from document_converter.logger import get_logger
from document_converter.models import (
    Extraction,
    FormatTag,
    RowsContent,
    SheetsContent,
    TextContent,
)

logger = get_logger(__name__)

_BINARY_SNIFF_BYTES = 8192


def strict_decode(file_bytes: bytes) -> str:
    """Decode a UTF-8 buffer, dropping a leading BOM.

    Raises:
        DecodingError: If the buffer is not valid UTF-8
    """
    try:
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodingError(
            f"Unable to decode text (not valid UTF-8 at byte {exc.start})", exc.start
        ) from exc


def decode_text(file_bytes: bytes) -> tuple[str, list[str]]:
    """Decode a UTF-8 buffer, replacing invalid sequences with U+FFFD.

    A lossy decode is reported as a single warning.
    """
    try:
        return strict_decode(file_bytes), []
    except DecodingError as exc:
        logger.warning(
            "Invalid UTF-8 in text buffer, decoding lossily",
            extra_data={"first_bad_byte": exc.position, "size_bytes": len(file_bytes)},
        )
        text = file_bytes.decode("utf-8-sig", errors="replace")
        return text, [f"invalid UTF-8 sequences replaced (first at byte {exc.position})"]


def looks_binary(file_bytes: bytes) -> bool:
    """True for container signatures or NUL bytes near the start of the buffer."""
    if file_bytes.startswith((ZIP_SIGNATURE, OLE_SIGNATURE)):
        return True
    return b"\x00" in file_bytes[:_BINARY_SNIFF_BYTES]


class BaseExtractor:
    """Common plumbing for extractors: limits and paragraph capping."""

    format_tag: FormatTag = FormatTag.UNKNOWN

    def __init__(self, limits: Optional[ConversionLimits] = None):
        self.limits = limits or ConversionLimits()

    def extract(self, file_bytes: bytes) -> Extraction:
        raise NotImplementedError

    def _cap_paragraphs(self, paragraphs: list[str], warnings: list[str]) -> list[str]:
        limit = self.limits.max_paragraphs
        if len(paragraphs) > limit:
            warnings.append(f"paragraphs truncated at {limit} (of {len(paragraphs)})")
            return paragraphs[:limit]
        return paragraphs


class PlainTextExtractor(BaseExtractor):
    """One paragraph per line; a run of blank lines becomes one empty paragraph."""

    format_tag = FormatTag.PLAIN_TEXT

    def extract(self, file_bytes: bytes) -> Extraction:
        text, warnings = decode_text(file_bytes)
        limit = self.limits.max_paragraphs

        paragraphs: list[str] = []
        pending_break = False
        for line in text.splitlines():
            line = line.rstrip()
            if not line:
                pending_break = bool(paragraphs)
                continue
            # the separator is only emitted ahead of the next non-blank line
            needed = 2 if pending_break else 1
            if len(paragraphs) + needed > limit:
                warnings.append(f"paragraphs truncated at {limit}")
                break
            if pending_break:
                paragraphs.append("")
                pending_break = False
            paragraphs.append(line)

        return Extraction(TextContent(tuple(paragraphs)), tuple(warnings), text)


class HtmlExtractor(BaseExtractor):
    """Visible text of an HTML page, split at block-level elements."""

    format_tag = FormatTag.HTML

    DROPPED_TAGS = ["script", "style", "noscript", "template"]
    BLOCK_TAGS = [
        "address", "article", "aside", "blockquote", "caption", "dd", "details",
        "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form",
        "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav",
        "ol", "p", "pre", "section", "summary", "table", "td", "th", "title",
        "tr", "ul",
    ]
    _BREAK = "\x00"

    def extract(self, file_bytes: bytes) -> Extraction:
        text, warnings = decode_text(file_bytes)

        soup = BeautifulSoup(text.replace(self._BREAK, ""), "html.parser")
        for tag in soup.find_all(self.DROPPED_TAGS):
            if not tag.decomposed:
                tag.decompose()
        for tag in soup.find_all(self.BLOCK_TAGS):
            tag.insert_before(self._BREAK)
            tag.insert_after(self._BREAK)
        for tag in soup.find_all("br"):
            tag.replace_with(self._BREAK)

        paragraphs = []
        for chunk in soup.get_text().split(self._BREAK):
            paragraph = " ".join(chunk.split())
            if paragraph:
                paragraphs.append(paragraph)

        paragraphs = self._cap_paragraphs(paragraphs, warnings)
        return Extraction(TextContent(tuple(paragraphs)), tuple(warnings), text)


class CsvExtractor(BaseExtractor):
    """RFC 4180 style comma-separated values; ragged rows are kept as-is."""

    format_tag = FormatTag.CSV

    def extract(self, file_bytes: bytes) -> Extraction:
        if looks_binary(file_bytes):
            raise ExtractionError("File content is binary, not comma-separated text")

        text, warnings = decode_text(file_bytes)
        limit = self.limits.max_rows

        rows: list[tuple[str, ...]] = []
        reader = csv.reader(io.StringIO(text, newline=""))
        try:
            for row in reader:
                if not row:
                    continue
                if len(rows) >= limit:
                    warnings.append(f"rows truncated at {limit}")
                    break
                rows.append(tuple(row))
        except csv.Error as exc:
            warnings.append(
                f"malformed CSV at line {reader.line_num}: {exc}; remaining rows skipped"
            )

        if rows:
            width = len(rows[0])
            ragged = [number for number, row in enumerate(rows, start=1) if len(row) != width]
            if ragged:
                warnings.append(
                    f"{len(ragged)} row(s) differ from the header width of {width} "
                    f"columns (first at row {ragged[0]}); kept unpadded"
                )

        return Extraction(RowsContent(tuple(rows)), tuple(warnings), text)


def _format_datetime(value: datetime.datetime) -> str:
    if value.time() == datetime.time(0):
        return value.date().isoformat()
    return value.isoformat(sep=" ")


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    # 15 significant digits, as spreadsheet applications display them
    return format(value, ".15g")


def xlsx_cell_text(value: Any) -> str:
    """Render an openpyxl cell value as it would be displayed."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        return _format_number(value)
    if isinstance(value, datetime.datetime):
        return _format_datetime(value)
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _trim_table(table: list[list[str]]) -> list[list[str]]:
    """Drop trailing empty rows and columns, padding the rest to one width."""
    while table and not any(table[-1]):
        table.pop()

    width = 0
    for row in table:
        for index in range(len(row) - 1, width - 1, -1):
            if row[index]:
                width = index + 1
                break

    return [row[:width] + [""] * (width - len(row)) for row in table]


class SpreadsheetExtractor(BaseExtractor):
    """Workbook sheets as rows of displayed cell text.

    XLSX workbooks are read with openpyxl, legacy XLS workbooks with xlrd.
    """

    format_tag = FormatTag.SPREADSHEET

    def extract(self, file_bytes: bytes) -> Extraction:
        if file_bytes.startswith(ZIP_SIGNATURE):
            reader = self._read_xlsx
        elif file_bytes.startswith(OLE_SIGNATURE):
            reader = self._read_xls
        else:
            raise ExtractionError("File is not an XLSX or XLS workbook")

        try:
            sheets, warnings = reader(file_bytes)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"Failed to read workbook: {exc}") from exc

        return Extraction(SheetsContent(tuple(sheets)), tuple(warnings))

    def _read_xlsx(self, file_bytes: bytes):
        workbook = load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
        try:
            named_rows = (
                (worksheet.title, self._iter_xlsx_rows(worksheet), worksheet.max_column)
                for worksheet in workbook.worksheets
            )
            return self._collect_sheets(named_rows, xlsx_cell_text)
        finally:
            workbook.close()

    def _iter_xlsx_rows(self, worksheet) -> Iterator[tuple]:
        # Rows are padded to max_col, so bound it by the column limit. One
        # extra column is read to tell whether anything was cut off.
        max_col = self.limits.max_columns + 1
        if worksheet.max_column:
            max_col = min(max_col, worksheet.max_column)
        return worksheet.iter_rows(max_col=max_col, values_only=True)

    def _read_xls(self, file_bytes: bytes):
        book = xlrd.open_workbook(
            file_contents=file_bytes, on_demand=True, logfile=io.StringIO()
        )
        try:
            return self._collect_sheets(self._iter_xls_sheets(book), lambda text: text)
        finally:
            book.release_resources()

    def _iter_xls_sheets(self, book) -> Iterator[tuple[str, Iterable[list[str]], int]]:
        for index in range(book.nsheets):
            sheet = book.sheet_by_index(index)
            ncols = min(sheet.ncols, self.limits.max_columns + 1)
            rows = (
                [
                    self._xls_cell_text(book, cell)
                    for cell in sheet.row_slice(row_index, 0, ncols)
                ]
                for row_index in range(sheet.nrows)
            )
            yield sheet.name, rows, sheet.ncols
            book.unload_sheet(index)

    @staticmethod
    def _xls_cell_text(book, cell) -> str:
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return ""
        if cell.ctype == xlrd.XL_CELL_NUMBER:
            return _format_number(cell.value)
        if cell.ctype == xlrd.XL_CELL_DATE:
            try:
                return _format_datetime(xlrd.xldate_as_datetime(cell.value, book.datemode))
            except (xlrd.XLDateError, OverflowError, ValueError):
                return _format_number(cell.value)
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return "TRUE" if cell.value else "FALSE"
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return xlrd.error_text_from_code.get(cell.value, "#ERROR")
        return str(cell.value)

    def _collect_sheets(
        self,
        named_rows: Iterable[tuple[str, Iterable[Sequence[Any]], Optional[int]]],
        cell_text: Callable[[Any], str],
    ) -> tuple[list, list[str]]:
        """Build sheet tables within the sheet, row and column limits.

        Each entry of ``named_rows`` is the sheet name, its rows of raw values
        and the column count the sheet declares, or None when unknown.
        """
        max_sheets = self.limits.max_sheets
        max_columns = self.limits.max_columns
        rows_left = self.limits.max_rows
        sheets = []
        warnings: list[str] = []
        seen = 0

        for name, rows, declared_width in named_rows:
            if seen >= max_sheets:
                warnings.append(f"sheets truncated at {max_sheets}")
                break
            seen += 1
            if rows_left <= 0:
                warnings.append(f"sheet '{name}' skipped: row limit of {self.limits.max_rows} reached")
                continue

            table: list[list[str]] = []
            columns_cut = bool(declared_width and declared_width > max_columns)
            for values in rows:
                if len(table) >= rows_left:
                    warnings.append(f"sheet '{name}' truncated at {len(table)} rows")
                    break
                cells = [cell_text(value) for value in values[: max_columns + 1]]
                if len(cells) > max_columns:
                    columns_cut = columns_cut or any(cells[max_columns:])
                    del cells[max_columns:]
                while cells and not cells[-1]:
                    cells.pop()
                table.append(cells)
            rows_left -= len(table)
            if columns_cut:
                warnings.append(f"sheet '{name}' truncated at {max_columns} columns")

            table = _trim_table(table)
            if not table:
                warnings.append(f"sheet '{name}' skipped: empty")
                continue
            sheets.append((name, tuple(tuple(row) for row in table)))

        if seen == 0:
            warnings.append("workbook contains no sheets")

        logger.debug(
            "Workbook sheets collected",
            extra_data={"sheets_read": seen, "sheets_kept": len(sheets)},
        )
        return sheets, warnings


class WordDocumentExtractor(BaseExtractor):
    """Body paragraphs of a DOCX file; tables become pipe-joined rows."""

    format_tag = FormatTag.WORD_DOCUMENT

    def extract(self, file_bytes: bytes) -> Extraction:
        try:
            document = Document(io.BytesIO(file_bytes))
        except Exception as exc:
            raise ExtractionError(f"Failed to open Word document: {exc}") from exc

        paragraphs: list[str] = []
        table_count = 0
        for block in self._iter_blocks(document, document.element.body):
            if isinstance(block, Table):
                table_count += 1
                for row in block.rows:
                    line = " | ".join(cell.text.strip() for cell in self._distinct_cells(row))
                    if line.replace("|", "").strip():
                        paragraphs.append(line)
            else:
                text = block.text.strip()
                if text:
                    paragraphs.append(text)
            if len(paragraphs) > self.limits.max_paragraphs:
                break

        warnings: list[str] = []
        if table_count:
            warnings.append(f"{table_count} table(s) flattened to pipe-delimited text")
        paragraphs = self._cap_paragraphs(paragraphs, warnings)

        return Extraction(TextContent(tuple(paragraphs)), tuple(warnings))

    @classmethod
    def _iter_blocks(cls, parent, element) -> Iterator[Any]:
        """Paragraphs and tables in body order, including content controls."""
        for child in element.iterchildren():
            if child.tag == qn("w:p"):
                yield Paragraph(child, parent)
            elif child.tag == qn("w:tbl"):
                yield Table(child, parent)
            elif child.tag == qn("w:sdt"):
                content = child.find(qn("w:sdtContent"))
                if content is not None:
                    yield from cls._iter_blocks(parent, content)

    @staticmethod
    def _distinct_cells(row) -> list:
        # A horizontally merged cell is repeated once per grid column it spans
        cells = []
        for cell in row.cells:
            if not cells or cells[-1]._tc is not cell._tc:
                cells.append(cell)
        return cells


class PdfExtractor(BaseExtractor):
    """Text blocks of each PDF page, in page order. No OCR is attempted."""

    format_tag = FormatTag.PDF

    def extract(self, file_bytes: bytes) -> Extraction:
        try:
            document = fitz.open(stream=file_bytes, filetype="pdf")
        except Exception as exc:
            raise ExtractionError(f"Unable to open PDF: {exc}") from exc

        try:
            if document.needs_pass:
                raise ExtractionError("PDF is encrypted and cannot be read")

            page_count = document.page_count
            warnings: list[str] = []
            if page_count == 0:
                return Extraction(
                    TextContent(()), ("no pages processed: PDF has zero pages",)
                )

            max_pages = self.limits.max_pages
            if page_count > max_pages:
                warnings.append(f"pages truncated at {max_pages} (of {page_count})")

            paragraphs: list[str] = []
            for page_index in range(min(page_count, max_pages)):
                page_number = page_index + 1
                try:
                    blocks = document.load_page(page_index).get_text("blocks")
                except Exception as exc:
                    logger.warning(
                        "Failed to read PDF page",
                        extra_data={"page_number": page_number, "error": str(exc)},
                    )
                    paragraphs.append("")
                    warnings.append(f"page {page_number} could not be read: {exc}")
                    continue

                page_paragraphs = [
                    " ".join(block[4].split()) for block in blocks if block[6] == 0
                ]
                page_paragraphs = [text for text in page_paragraphs if text]
                if not page_paragraphs:
                    paragraphs.append("")
                    warnings.append(f"page {page_number} has no extractable text")
                paragraphs.extend(page_paragraphs)

                if len(paragraphs) > self.limits.max_paragraphs:
                    break

            paragraphs = self._cap_paragraphs(paragraphs, warnings)
            return Extraction(TextContent(tuple(paragraphs)), tuple(warnings))
        finally:
            document.close()


EXTRACTORS: dict[FormatTag, type[BaseExtractor]] = {
    FormatTag.PLAIN_TEXT: PlainTextExtractor,
    FormatTag.HTML: HtmlExtractor,
    FormatTag.CSV: CsvExtractor,
    FormatTag.SPREADSHEET: SpreadsheetExtractor,
    FormatTag.WORD_DOCUMENT: WordDocumentExtractor,
    FormatTag.PDF: PdfExtractor,
}


def get_extractor(tag: FormatTag, limits: Optional[ConversionLimits] = None) -> BaseExtractor:
    """Instantiate the extractor registered for ``tag``.

    Raises:
        UnsupportedTypeError: If no extractor handles the tag
    """
    try:
        extractor_cls = EXTRACTORS[tag]
    except KeyError:
        raise UnsupportedTypeError(f"No extractor for format: {tag.value}") from None
    return extractor_cls(limits)
