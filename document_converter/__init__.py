"""Document conversion engine: structured records and flat CSV from uploads."""

from document_converter.api import convert, convert_batch, convert_document
from document_converter.builder import build, summarize
from document_converter.config import ConversionLimits, ConverterConfig
from document_converter.detector import FormatDetector, detect
from document_converter.exceptions import (
    DecodingError,
    DocumentConverterError,
    ExtractionError,
    UnsupportedTypeError,
)
from document_converter.flattener import flatten
from document_converter.handler import DocumentConverter
from document_converter.models import (
    ContentValue,
    ErrorContent,
    Extraction,
    FormatTag,
    RowsContent,
    SheetsContent,
    StructuredRecord,
    SummaryStats,
    TextContent,
)
from document_converter.serialization import (
    build_response_item,
    record_to_dict,
    record_to_json,
)

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "convert",
    "convert_batch",
    "convert_document",
    "flatten",
    # Core classes
    "DocumentConverter",
    "FormatDetector",
    "detect",
    "build",
    "summarize",
    # Data models
    "FormatTag",
    "ContentValue",
    "TextContent",
    "RowsContent",
    "SheetsContent",
    "ErrorContent",
    "Extraction",
    "SummaryStats",
    "StructuredRecord",
    # Serialization
    "record_to_dict",
    "record_to_json",
    "build_response_item",
    # Configuration
    "ConversionLimits",
    "ConverterConfig",
    # Exceptions
    "DocumentConverterError",
    "UnsupportedTypeError",
    "ExtractionError",
    "DecodingError",
]
