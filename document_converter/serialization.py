"""Exchange-format serialization of structured records."""

import json
from typing import Any

from document_converter.flattener import flatten
from document_converter.models import (
    ContentValue,
    ErrorContent,
    RowsContent,
    SheetsContent,
    StructuredRecord,
    TextContent,
)


def content_to_dict(content: ContentValue) -> dict[str, Any]:
    if isinstance(content, TextContent):
        return {"type": "text", "paragraphs": list(content.paragraphs)}
    if isinstance(content, RowsContent):
        return {"type": "rows", "rows": [list(row) for row in content.rows]}
    if isinstance(content, SheetsContent):
        return {"type": "sheets", "sheets": content.as_dict()}
    if isinstance(content, ErrorContent):
        return {"type": "error", "message": content.message}
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


def record_to_dict(record: StructuredRecord) -> dict[str, Any]:
    """Attribute-keyed form of a record; field and array order are preserved."""
    return {
        "filename": record.filename,
        "mimeType": record.mime_type,
        "summary": record.summary.to_dict(),
        "content": content_to_dict(record.content),
        "raw": record.raw,
        "warnings": list(record.warnings),
    }


def record_to_json(record: StructuredRecord, indent: int = 2) -> str:
    return json.dumps(record_to_dict(record), indent=indent, ensure_ascii=False)


def build_response_item(record: StructuredRecord) -> dict[str, Any]:
    """Per-file payload returned to upload clients.

    Combines the serialized record with its flattened CSV text.
    """
    return {
        "filename": record.filename,
        "mimeType": record.mime_type,
        "summary": record.summary.to_dict(),
        "json": record_to_dict(record),
        "csv": flatten(record),
        "warnings": list(record.warnings),
    }
