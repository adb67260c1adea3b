"""Flattening of structured records into a single CSV document."""

import csv
import io

from document_converter.models import (
    ErrorContent,
    RowsContent,
    SheetsContent,
    StructuredRecord,
    TextContent,
)

TEXT_HEADER = ("paragraph_index", "text")
ERROR_HEADER = ("error",)


def _new_writer(buffer: io.StringIO):
    # QUOTE_MINIMAL quotes exactly the fields holding a comma, quote, CR or LF
    return csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")


def flatten(record: StructuredRecord) -> str:
    """Render the record's content as CSV text.

    The output depends only on the record, so repeated calls return the
    identical string.
    """
    buffer = io.StringIO()
    writer = _new_writer(buffer)
    content = record.content

    if isinstance(content, RowsContent):
        writer.writerows(content.rows)
    elif isinstance(content, SheetsContent):
        for index, (name, rows) in enumerate(content.sheets):
            if index:
                writer.writerow(())
            writer.writerow((name,))
            writer.writerows(rows)
    elif isinstance(content, TextContent):
        writer.writerow(TEXT_HEADER)
        writer.writerows(enumerate(content.paragraphs))
    elif isinstance(content, ErrorContent):
        writer.writerow(ERROR_HEADER)
        writer.writerow((content.message,))
    else:
        raise TypeError(f"Unsupported content type: {type(content).__name__}")

    return buffer.getvalue()
