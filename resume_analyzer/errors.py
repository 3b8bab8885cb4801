"""Typed failures raised by the extraction pipeline.

Each error carries a stable ``kind`` so a presentation layer can map it to
guidance ("try DOCX/TXT", "remove password protection", ...). The library
itself does not own user-facing wording.
"""

from __future__ import annotations

from typing import Optional


class ResumeAnalyzerError(Exception):
    """Base class for all pipeline failures."""

    kind = "Error"
    is_input_error = False

    def __init__(self, message: str = "", cause: Optional[BaseException] = None) -> None:
        super().__init__(message or self.kind)
        self.cause = cause


class InvalidFormatError(ResumeAnalyzerError):
    """Input bytes do not start with the PDF signature."""

    kind = "InvalidFormat"
    is_input_error = True


class TooLargeError(ResumeAnalyzerError):
    """Input exceeds the configured size ceiling."""

    kind = "TooLarge"
    is_input_error = True

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"input is {size} bytes, limit is {limit} bytes")
        self.size = size
        self.limit = limit


class LoadFailedError(ResumeAnalyzerError):
    """The document could not be opened.

    ``reason`` is ``"encrypted"`` for password/encryption failures and
    ``"corrupt"`` otherwise.
    """

    kind = "LoadFailed"

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        reason: str = "corrupt",
        attempts: int = 0,
    ) -> None:
        super().__init__(message, cause=cause)
        self.reason = reason
        self.attempts = attempts

    @property
    def encrypted(self) -> bool:
        return self.reason == "encrypted"


class EmptyDocumentError(ResumeAnalyzerError):
    """The opened document reports zero pages."""

    kind = "EmptyDocument"


class NoExtractableTextError(ResumeAnalyzerError):
    """No page yielded a non-empty line.

    ``hint`` is ``"encrypted"`` or ``"scanned"``.
    """

    kind = "NoExtractableText"

    def __init__(self, message: str, hint: str = "scanned", pages_failed: int = 0) -> None:
        super().__init__(message)
        self.hint = hint
        self.pages_failed = pages_failed


class InsufficientTextError(ResumeAnalyzerError):
    """Sanitized text is shorter than the usable-resume floor."""

    kind = "InsufficientText"

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(f"sanitized text has {length} characters, at least {minimum} required")
        self.length = length
        self.minimum = minimum


class ExtractionCancelledError(ResumeAnalyzerError):
    """The caller abandoned an in-flight load or extraction."""

    kind = "Cancelled"


__all__ = [
    "ResumeAnalyzerError",
    "InvalidFormatError",
    "TooLargeError",
    "LoadFailedError",
    "EmptyDocumentError",
    "NoExtractableTextError",
    "InsufficientTextError",
    "ExtractionCancelledError",
]
