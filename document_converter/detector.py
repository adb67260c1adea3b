"""Document format detection."""

import io
import re
import zipfile
import zlib
from pathlib import PurePath

from document_converter.logger import get_logger
from document_converter.models import FormatTag

logger = get_logger(__name__)


PDF_SIGNATURE = b"%PDF-"
ZIP_SIGNATURE = b"PK\x03\x04"
OLE_SIGNATURE = b"\xd0\xcf\x11\xe0"  # Legacy Office container (.xls/.doc)

EXTENSION_FORMATS = {
    ".pdf": FormatTag.PDF,
    ".docx": FormatTag.WORD_DOCUMENT,
    ".csv": FormatTag.CSV,
    ".xlsx": FormatTag.SPREADSHEET,
    ".xls": FormatTag.SPREADSHEET,
    ".htm": FormatTag.HTML,
    ".html": FormatTag.HTML,
    ".txt": FormatTag.PLAIN_TEXT,
}

MIME_TYPES = {
    FormatTag.PLAIN_TEXT: "text/plain",
    FormatTag.HTML: "text/html",
    FormatTag.CSV: "text/csv",
    FormatTag.SPREADSHEET: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    FormatTag.WORD_DOCUMENT: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    FormatTag.PDF: "application/pdf",
    FormatTag.UNKNOWN: "application/octet-stream",
}

# OOXML parts and content types identifying the two zip-based formats
_WORD_PART = "word/document.xml"
_WORKBOOK_PART = "xl/workbook.xml"
_CONTENT_TYPES_PART = "[Content_Types].xml"
_WORD_CONTENT_TYPE = b"wordprocessingml.document.main"
_WORKBOOK_CONTENT_TYPE = b"spreadsheetml.sheet.main"

_HTML_TAG_RE = re.compile(
    r"<(?:!doctype\s+html|html|head|body|title|p|div|br|span|table|h[1-6]|ul|ol|li)\b",
    re.IGNORECASE,
)
_SNIFF_TEXT_BYTES = 64 * 1024
_MANIFEST_READ_LIMIT = 256 * 1024


def mime_type_for(tag: FormatTag) -> str:
    return MIME_TYPES[tag]


class FormatDetector:
    """Classifies a file as one of the supported formats.

    The filename extension wins when it is recognized; otherwise the content
    is sniffed. Detection never raises: unrecognized input is UNKNOWN.
    """

    def detect(self, file_name: str, file_bytes: bytes) -> FormatTag:
        suffix = PurePath(file_name or "").suffix.lower()

        tag = EXTENSION_FORMATS.get(suffix)
        if tag is not None:
            logger.debug(
                "Detected format from file extension",
                extra_data={"file_name": file_name, "extension": suffix, "format": tag.value},
            )
            return tag

        tag = self._sniff(file_bytes)
        if tag is FormatTag.UNKNOWN:
            logger.warning(
                "Unable to detect document format",
                extra_data={
                    "file_name": file_name,
                    "extension": suffix or None,
                    "file_size_bytes": len(file_bytes),
                },
            )
        else:
            logger.debug(
                "Detected format from file content",
                extra_data={"file_name": file_name, "format": tag.value},
            )
        return tag

    def _sniff(self, file_bytes: bytes) -> FormatTag:
        if not file_bytes:
            return FormatTag.UNKNOWN
        if file_bytes.startswith(PDF_SIGNATURE):
            return FormatTag.PDF
        if file_bytes.startswith(ZIP_SIGNATURE):
            return self._sniff_zip(file_bytes)
        if file_bytes.startswith(OLE_SIGNATURE):
            # .xls and .doc share this container; without an extension we cannot tell
            return FormatTag.UNKNOWN
        return self._sniff_text(file_bytes)

    @staticmethod
    def _sniff_zip(file_bytes: bytes) -> FormatTag:
        """Tell DOCX from XLSX by the parts listed in the archive."""
        try:
            with zipfile.ZipFile(io.BytesIO(file_bytes)) as archive:
                names = set(archive.namelist())
                if _WORD_PART in names:
                    return FormatTag.WORD_DOCUMENT
                if _WORKBOOK_PART in names:
                    return FormatTag.SPREADSHEET
                if _CONTENT_TYPES_PART in names:
                    with archive.open(_CONTENT_TYPES_PART) as manifest:
                        content_types = manifest.read(_MANIFEST_READ_LIMIT)
                    if _WORD_CONTENT_TYPE in content_types:
                        return FormatTag.WORD_DOCUMENT
                    if _WORKBOOK_CONTENT_TYPE in content_types:
                        return FormatTag.SPREADSHEET
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            KeyError,
            OSError,
            EOFError,
            zlib.error,
        ) as exc:
            logger.debug(
                "Zip container could not be inspected",
                extra_data={"error_type": type(exc).__name__, "error": str(exc)},
            )
        return FormatTag.UNKNOWN

    @staticmethod
    def _sniff_text(file_bytes: bytes) -> FormatTag:
        head = file_bytes[:_SNIFF_TEXT_BYTES]
        if b"\x00" in head:
            return FormatTag.UNKNOWN
        try:
            text = head.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            # A multi-byte sequence cut at the sniff boundary is still text
            if len(file_bytes) <= _SNIFF_TEXT_BYTES or exc.start < len(head) - 3:
                return FormatTag.UNKNOWN
            text = head[: exc.start].decode("utf-8-sig")
        if _HTML_TAG_RE.search(text):
            return FormatTag.HTML
        return FormatTag.PLAIN_TEXT


def detect(file_name: str, file_bytes: bytes) -> FormatTag:
    """Module-level shortcut for ``FormatDetector().detect``."""
    return FormatDetector().detect(file_name, file_bytes)
