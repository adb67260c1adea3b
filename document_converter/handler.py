"""Conversion orchestration."""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from document_converter.builder import build, build_error
from document_converter.config import ConverterConfig
from document_converter.detector import FormatDetector
from document_converter.exceptions import ExtractionError
from document_converter.extractor import get_extractor
from document_converter.logger import Timer, get_logger, set_request_id
from document_converter.models import FormatTag, StructuredRecord

logger = get_logger(__name__)

UNSUPPORTED_MESSAGE = "Unsupported file type"


class DocumentConverter:
    def __init__(
        self,
        detector: Optional[FormatDetector] = None,
        config: Optional[ConverterConfig] = None,
    ) -> None:
        """Initialize the converter.

        Args:
            detector: Format detector. If None, creates default.
            config: Limits and batch settings. If None, uses defaults.
        """
        self.detector = detector or FormatDetector()
        self.config = config or ConverterConfig()

    def convert(self, file_name: str, file_bytes: bytes) -> StructuredRecord:
        """Convert one document into a StructuredRecord.

        Never raises: unsupported formats and extraction failures are
        reported through ``ErrorContent`` on the returned record.

        Args:
            file_name: Original filename
            file_bytes: Complete file content

        Returns:
            StructuredRecord for the file
        """
        tag = FormatTag.UNKNOWN
        with Timer("conversion") as timer:
            try:
                file_bytes = bytes(file_bytes)
                tag = self.detector.detect(file_name, file_bytes)
                record = self._convert_detected(file_name, file_bytes, tag)
            except Exception as exc:
                message = f"Conversion failed: {exc}"
                logger.error(
                    "Unexpected conversion failure",
                    extra_data={
                        "file_name": file_name,
                        "format": tag.value,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                    exc_info=True,
                )
                record = build_error(file_name, tag, message, [message])

        if record.is_error:
            return record

        logger.info(
            "Document converted",
            extra_data={
                "file_name": file_name,
                "format": tag.value,
                "content_type": type(record.content).__name__,
                "warning_count": len(record.warnings),
                "conversion_time_ms": timer.get_elapsed_ms(),
            },
        )
        return record

    def _convert_detected(
        self, file_name: str, file_bytes: bytes, tag: FormatTag
    ) -> StructuredRecord:
        if tag is FormatTag.UNKNOWN:
            logger.warning(
                "Skipping unsupported document",
                extra_data={"file_name": file_name, "file_size_bytes": len(file_bytes)},
            )
            return build_error(file_name, tag, UNSUPPORTED_MESSAGE)

        extractor = get_extractor(tag, self.config.limits)
        with Timer("extraction") as extract_timer:
            try:
                extraction = extractor.extract(file_bytes)
            except ExtractionError as exc:
                message = str(exc)
            except Exception as exc:
                message = f"Failed to extract {tag.value} document: {exc}"
            else:
                message = None

        if message is not None:
            logger.error(
                "Document extraction failed",
                extra_data={
                    "file_name": file_name,
                    "format": tag.value,
                    "error": message,
                    "extraction_time_ms": extract_timer.get_elapsed_ms(),
                },
            )
            return build_error(file_name, tag, message, [message])

        if extraction.warnings:
            logger.warning(
                "Document extracted with warnings",
                extra_data={
                    "file_name": file_name,
                    "format": tag.value,
                    "warnings": "; ".join(extraction.warnings),
                },
            )

        return build(
            file_name,
            tag,
            extraction.content,
            extraction.warnings,
            extraction.source_text,
        )

    def convert_batch(
        self,
        files: Sequence[tuple[str, bytes]],
        max_workers: Optional[int] = None,
        request_id: Optional[str] = None,
    ) -> list[StructuredRecord]:
        """Convert several documents in parallel, preserving input order.

        Args:
            files: (file_name, file_bytes) pairs
            max_workers: Thread pool size. Defaults to ``config.max_workers``.
            request_id: Correlation id for the batch's log lines. Generated if None.

        Returns:
            One StructuredRecord per input, in input order
        """
        # The batch's request id lives in a context copy, leaving the caller's untouched
        return contextvars.copy_context().run(
            self._run_batch, list(files), max_workers, request_id
        )

    def _run_batch(
        self,
        files: list[tuple[str, bytes]],
        max_workers: Optional[int],
        request_id: Optional[str],
    ) -> list[StructuredRecord]:
        set_request_id(request_id)
        workers = max(1, min(max_workers or self.config.max_workers, len(files) or 1))

        logger.info(
            "Starting batch conversion",
            extra_data={"file_count": len(files), "max_workers": workers},
        )

        with Timer("batch") as batch_timer:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # Each task runs in its own copy of the context so the request id is visible
                futures = [
                    executor.submit(contextvars.copy_context().run, self.convert, name, data)
                    for name, data in files
                ]
                records = [future.result() for future in futures]

        logger.info(
            "Batch conversion completed",
            extra_data={
                "file_count": len(records),
                "failed_count": sum(1 for record in records if record.is_error),
                "batch_time_ms": batch_timer.get_elapsed_ms(),
            },
        )
        return records
