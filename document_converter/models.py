"""Data models for document converter."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

Row = tuple[str, ...]


class FormatTag(str, Enum):
    """Engine-side classification of an input document."""

    PLAIN_TEXT = "plain_text"
    HTML = "html"
    CSV = "csv"
    SPREADSHEET = "spreadsheet"
    WORD_DOCUMENT = "word_document"
    PDF = "pdf"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TextContent:
    """Ordered free-text paragraphs. Empty strings mark blank paragraphs."""

    paragraphs: tuple[str, ...] = ()


@dataclass(frozen=True)
class RowsContent:
    """Ordered rows of cell strings; rows may differ in width."""

    rows: tuple[Row, ...] = ()


@dataclass(frozen=True)
class SheetsContent:
    """Named sheets of rows, in workbook order."""

    sheets: tuple[tuple[str, tuple[Row, ...]], ...] = ()

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.sheets]

    def as_dict(self) -> dict[str, list[list[str]]]:
        return {name: [list(row) for row in rows] for name, rows in self.sheets}


@dataclass(frozen=True)
class ErrorContent:
    """Content of a record whose conversion failed."""

    message: str


ContentValue = Union[TextContent, RowsContent, SheetsContent, ErrorContent]


@dataclass(frozen=True)
class SummaryStats:
    """Format-dependent statistics; unset fields do not apply to the content."""

    word_count: Optional[int] = None
    line_count: Optional[int] = None
    paragraph_count: Optional[int] = None
    sheet_names: Optional[tuple[str, ...]] = None
    record_count: Optional[int] = None

    def to_dict(self) -> dict:
        """Exchange form with camelCase keys, omitting unset fields."""
        data: dict = {}
        if self.word_count is not None:
            data["wordCount"] = self.word_count
        if self.line_count is not None:
            data["lineCount"] = self.line_count
        if self.paragraph_count is not None:
            data["paragraphCount"] = self.paragraph_count
        if self.sheet_names is not None:
            data["sheetNames"] = list(self.sheet_names)
        if self.record_count is not None:
            data["recordCount"] = self.record_count
        return data


@dataclass(frozen=True)
class Extraction:
    """Output of a single extractor run."""

    content: ContentValue
    warnings: tuple[str, ...] = ()
    source_text: Optional[str] = None  # decoded input, for text-based formats


@dataclass(frozen=True)
class StructuredRecord:
    """Unified result of converting one document."""

    filename: str
    mime_type: str
    content: ContentValue
    summary: SummaryStats = field(default_factory=SummaryStats)
    raw: Optional[str] = None
    warnings: tuple[str, ...] = ()
    format_tag: FormatTag = FormatTag.UNKNOWN

    @property
    def is_error(self) -> bool:
        return isinstance(self.content, ErrorContent)
