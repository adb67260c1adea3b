"""Configuration classes for document converter."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConversionLimits:
    """Per-file ceilings on extraction work.

    Exceeding any limit truncates the extraction and records a warning on the
    resulting record; it never fails the conversion.

    Examples:
        >>> # Defaults are generous but finite
        >>> limits = ConversionLimits()

        >>> # Tight limits for previews
        >>> limits = ConversionLimits(max_pages=5, max_rows=200)
    """

    max_pages: int = 2000
    """Maximum PDF pages examined."""

    max_rows: int = 1_000_000
    """Maximum rows read from a CSV file, or across all sheets of a workbook."""

    max_sheets: int = 256
    """Maximum worksheets read from a workbook."""

    max_columns: int = 1024
    """Maximum columns read from each worksheet row."""

    max_paragraphs: int = 200_000
    """Maximum paragraphs produced by text, HTML, Word and PDF extraction."""

    def __post_init__(self):
        for name in (
            "max_pages", "max_rows", "max_sheets", "max_columns", "max_paragraphs"
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True)
class ConverterConfig:
    """Configuration for the conversion orchestrator."""

    limits: ConversionLimits = field(default_factory=ConversionLimits)
    max_workers: int = 4
    """Thread pool size for batch conversion."""
