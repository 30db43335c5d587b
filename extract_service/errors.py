"""Error taxonomy for the extraction service.

Only ``RequestError`` fails a whole call. Everything else is raised inside a
single file's processing and converted into a failure result by the
orchestrator. ``OcrEngineError`` never leaves the OCR adapter.
"""

from __future__ import annotations


class ExtractServiceError(Exception):
    """Base class for all domain errors."""


class UnsupportedFormatError(ExtractServiceError):
    def __init__(self, file_name: str, mime_type: str | None) -> None:
        self.file_name = file_name
        self.mime_type = mime_type
        super().__init__(f"Unsupported file format: {file_name} ({mime_type or 'unknown'})")


class ExtractionError(ExtractServiceError):
    """The format parser could not make sense of the bytes."""


class FileTooLargeError(ExtractionError):
    def __init__(self, file_name: str, max_bytes: int) -> None:
        self.file_name = file_name
        self.max_bytes = max_bytes
        mb = max_bytes / (1024 * 1024)
        super().__init__(f"{file_name} exceeds the maximum file size of {mb:g} MB")


class OcrEngineError(ExtractServiceError):
    """Recognition engine failed to initialize or run."""


class RequestError(ExtractServiceError):
    """The batch request itself is malformed."""
