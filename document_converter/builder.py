"""Assembly of structured records from extractor output."""

from typing import Iterable, Optional

from document_converter.detector import mime_type_for
from document_converter.models import (
    ContentValue,
    ErrorContent,
    FormatTag,
    RowsContent,
    SheetsContent,
    StructuredRecord,
    SummaryStats,
    TextContent,
)


def summarize(content: ContentValue) -> SummaryStats:
    """Compute summary statistics from the shape of ``content`` alone."""
    if isinstance(content, TextContent):
        return SummaryStats(
            word_count=sum(len(paragraph.split()) for paragraph in content.paragraphs),
            line_count=len(content.paragraphs),
            paragraph_count=sum(1 for paragraph in content.paragraphs if paragraph.strip()),
        )
    if isinstance(content, RowsContent):
        return SummaryStats(record_count=len(content.rows))
    if isinstance(content, SheetsContent):
        return SummaryStats(
            sheet_names=tuple(content.names),
            record_count=sum(len(rows) for _, rows in content.sheets),
        )
    if isinstance(content, ErrorContent):
        return SummaryStats()
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


def raw_text(
    tag: FormatTag, content: ContentValue, source_text: Optional[str] = None
) -> Optional[str]:
    """Best-effort flat text of the original document, or None."""
    if isinstance(content, TextContent):
        return "\n".join(content.paragraphs)
    if isinstance(content, RowsContent):
        return source_text if tag is FormatTag.CSV else None
    if isinstance(content, (SheetsContent, ErrorContent)):
        return None
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


def build(
    file_name: str,
    tag: FormatTag,
    content: ContentValue,
    warnings: Iterable[str] = (),
    source_text: Optional[str] = None,
) -> StructuredRecord:
    """Wrap extracted content into a StructuredRecord.

    Args:
        file_name: Original filename, echoed verbatim
        tag: Detected format; determines the MIME type
        content: Extracted content variant
        warnings: Non-fatal issues collected during extraction
        source_text: Decoded input for text-based formats (used as raw CSV text)

    Returns:
        Immutable StructuredRecord
    """
    return StructuredRecord(
        filename=file_name,
        mime_type=mime_type_for(tag),
        content=content,
        summary=summarize(content),
        raw=raw_text(tag, content, source_text),
        warnings=tuple(warnings),
        format_tag=tag,
    )


def build_error(
    file_name: str, tag: FormatTag, message: str, warnings: Iterable[str] = ()
) -> StructuredRecord:
    """Error-bearing record: ErrorContent, empty summary, no raw text."""
    return build(file_name, tag, ErrorContent(message), warnings)
