"""High-level API for document conversion."""

from pathlib import Path
from typing import Optional, Sequence

from document_converter.config import ConverterConfig
from document_converter.handler import DocumentConverter
from document_converter.models import StructuredRecord


def convert(
    file_name: str, file_bytes: bytes, config: Optional[ConverterConfig] = None
) -> StructuredRecord:
    """Convert one in-memory document. Never raises for document problems."""
    return DocumentConverter(config=config).convert(file_name, file_bytes)


def convert_batch(
    files: Sequence[tuple[str, bytes]], config: Optional[ConverterConfig] = None
) -> list[StructuredRecord]:
    """Convert several in-memory documents in parallel, preserving order."""
    return DocumentConverter(config=config).convert_batch(files)


def convert_document(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    file_name: Optional[str] = None,
    config: Optional[ConverterConfig] = None,
) -> StructuredRecord:
    """Convert a document given either a path on disk or raw bytes.

    Args:
        file_path: Path to document file (alternative to file_bytes)
        file_bytes: Raw document bytes (alternative to file_path)
        file_name: Original filename (required if using file_bytes)
        config: Converter configuration (optional, uses defaults if not provided)

    Returns:
        StructuredRecord for the document

    Raises:
        ValueError: If neither or both of file_path and file_bytes are given,
            if file_bytes is given without file_name, or if file_path does
            not exist

    Examples:
        >>> record = convert_document(file_path="report.docx")
        >>> print(record.summary.word_count)

        >>> with open("data.csv", "rb") as f:
        ...     record = convert_document(file_bytes=f.read(), file_name="data.csv")
    """
    if file_path and file_bytes is not None:
        raise ValueError("Provide either file_path or file_bytes, not both")

    if not file_path and file_bytes is None:
        raise ValueError("Must provide either file_path or file_bytes")

    if file_path:
        path = Path(file_path)
        if not path.is_file():
            raise ValueError(f"File not found: {file_path}")
        file_bytes = path.read_bytes()
        file_name = file_name or path.name

    if not file_name:
        raise ValueError("file_name is required when using file_bytes")

    return convert(file_name, file_bytes, config=config)
