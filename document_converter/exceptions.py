"""Exceptions raised inside the conversion engine.

None of these escape ``DocumentConverter.convert``; the orchestrator turns
them into error-bearing records.
"""


class DocumentConverterError(Exception):
    """Base exception for document converter errors."""

    pass


class UnsupportedTypeError(DocumentConverterError):
    """Raised when no extractor exists for a format tag."""

    pass


class ExtractionError(DocumentConverterError):
    """Raised when an extractor cannot produce any usable content."""

    pass


class DecodingError(DocumentConverterError):
    """Raised when strict UTF-8 decoding of a text buffer fails."""

    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.position = position
