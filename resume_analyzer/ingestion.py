"""PDF loading for the resume analysis pipeline."""

from __future__ import annotations

import io
import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pdfplumber
from pdfminer.pdfdocument import PDFEncryptionError

from .errors import (
    ExtractionCancelledError,
    InvalidFormatError,
    LoadFailedError,
    TooLargeError,
)

LOGGER = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
MAX_PDF_BYTES = 10 * 1024 * 1024
SEARCHABLE_PAGES = 3

Opener = Callable[..., Any]


@dataclass
class LoaderConfig:
    """Configuration options for loading PDFs."""

    max_bytes: int = MAX_PDF_BYTES
    max_attempts: int = 3
    retry_delay: float = 1.0
    password: Optional[str] = None
    x_tolerance: float = 1.5
    y_tolerance: float = 1.5


def is_pdf_bytes(data: bytes) -> bool:
    """Return True when *data* starts with the PDF signature."""

    return bytes(data[: len(PDF_MAGIC)]) == PDF_MAGIC


def is_encryption_error(error: BaseException) -> bool:
    """Return True when *error* (or anything it wraps) is a password failure.

    pdfplumber re-raises pdfminer errors wrapped in its own exception type, so
    the cause chain and the exception args are both inspected. Messages are
    not: syntax errors quoting ``/Encrypt`` come from corrupt files.
    """

    seen = set()
    pending: List[BaseException] = [error]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, PDFEncryptionError):
            return True
        for linked in (current.__cause__, current.__context__):
            if linked is not None:
                pending.append(linked)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
    return False


def _metadata_value(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        return value.decode("latin-1")
    if isinstance(value, (list, tuple)):
        return [_metadata_value(item) for item in value]
    return str(value)


class PDFPage:
    """Handle to one page of an opened document."""

    def __init__(self, page: Any, number: int, config: LoaderConfig) -> None:
        self._page = page
        self.number = number
        self._config = config

    @property
    def height(self) -> float:
        return float(self._page.height or 0)

    def text_items(self) -> List[Dict[str, Any]]:
        """Return positioned text items in content-stream order.

        Items are ``{"text", "x", "y", "width"}`` where ``y`` is the run's
        baseline in PDF user space (measured up from the bottom edge).
        """

        words = self._page.extract_words(
            x_tolerance=self._config.x_tolerance,
            y_tolerance=self._config.y_tolerance,
            keep_blank_chars=False,
            use_text_flow=True,
        )
        height = self.height
        items: List[Dict[str, Any]] = []
        for word in words:
            item: Dict[str, Any] = {"text": word.get("text", "")}
            try:
                x0 = float(word["x0"])
                item["x"] = x0
                item["y"] = height - float(word["bottom"])
                item["width"] = max(float(word["x1"]) - x0, 0.0)
            except (KeyError, TypeError, ValueError):
                LOGGER.debug("Word on page %s has no usable geometry", self.number)
            items.append(item)
        return items


class PDFDocument:
    """An opened PDF exposing its pages one at a time."""

    def __init__(self, pdf: Any, config: LoaderConfig) -> None:
        self._pdf = pdf
        self._config = config
        self.page_count = len(pdf.pages)

    @property
    def is_encrypted(self) -> bool:
        document = getattr(self._pdf, "doc", None)
        return getattr(document, "encryption", None) is not None

    def get_page(self, number: int) -> PDFPage:
        """Return page *number* (1-based)."""

        if number < 1 or number > self.page_count:
            raise IndexError(f"page {number} out of range 1..{self.page_count}")
        return PDFPage(self._pdf.pages[number - 1], number, self._config)

    @property
    def metadata(self) -> Dict[str, Any]:
        """Page count plus the document information dictionary."""

        info = getattr(self._pdf, "metadata", None) or {}
        return {
            "page_count": self.page_count,
            "info": {str(key): _metadata_value(value) for key, value in info.items()},
        }

    def is_searchable(self, pages_to_check: int = SEARCHABLE_PAGES) -> bool:
        """Return True when one of the first pages carries a non-blank word."""

        for number in range(1, min(pages_to_check, self.page_count) + 1):
            try:
                items = self.get_page(number).text_items()
            except Exception as error:
                LOGGER.warning("Could not read text layer of page %s: %s", number, error)
                continue
            if any(str(item.get("text") or "").strip() for item in items):
                return True
        return False

    def close(self) -> None:
        self._pdf.close()

    def __enter__(self) -> "PDFDocument":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class PDFDocumentLoader:
    """Validate PDF bytes and open them with bounded retries."""

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        opener: Optional[Opener] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or LoaderConfig()
        self._opener = opener or pdfplumber.open
        self._sleep = sleep

    def validate(self, data: bytes) -> None:
        """Run the cheap checks that must pass before any parsing work."""

        if len(data) > self.config.max_bytes:
            raise TooLargeError(len(data), self.config.max_bytes)
        if not is_pdf_bytes(data):
            raise InvalidFormatError("input does not start with the %PDF signature")

    def _open(self, data: bytes) -> PDFDocument:
        pdf = self._opener(io.BytesIO(data), password=self.config.password or "")
        try:
            return PDFDocument(pdf, self.config)
        except Exception:
            pdf.close()
            raise

    def _wait(self, cancel_event: Optional[threading.Event]) -> None:
        # Wake early when the caller cancels mid-delay.
        if cancel_event is not None:
            cancel_event.wait(self.config.retry_delay)
        else:
            self._sleep(self.config.retry_delay)

    def load(self, data: bytes, cancel_event: Optional[threading.Event] = None) -> PDFDocument:
        """Return an opened :class:`PDFDocument` for *data*.

        Raises:
            TooLargeError: If *data* exceeds ``config.max_bytes``.
            InvalidFormatError: If *data* lacks the PDF signature.
            LoadFailedError: If every attempt to open the document failed.
            ExtractionCancelledError: If *cancel_event* was set between attempts.
        """

        self.validate(data)

        attempts = max(self.config.max_attempts, 1)
        last_error: Optional[BaseException] = None
        for attempt in range(1, attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise ExtractionCancelledError("load cancelled", cause=last_error)
            try:
                document = self._open(data)
            except Exception as error:
                last_error = error
                if is_encryption_error(error):
                    LOGGER.warning("PDF is password protected: %s", error)
                    raise LoadFailedError(
                        "document is encrypted", cause=error, reason="encrypted", attempts=attempt
                    ) from error
                LOGGER.warning("PDF loading attempt %s/%s failed: %s", attempt, attempts, error)
                if attempt < attempts:
                    self._wait(cancel_event)
                continue
            LOGGER.info("PDF loaded with %s pages", document.page_count)
            return document

        raise LoadFailedError(
            f"could not open document after {attempts} attempts",
            cause=last_error,
            attempts=attempts,
        ) from last_error

    def load_file(self, file_path: str, cancel_event: Optional[threading.Event] = None) -> PDFDocument:
        return self.load(Path(file_path).expanduser().read_bytes(), cancel_event=cancel_event)

    def read_metadata(self, data: bytes) -> Dict[str, Any]:
        with self.load(data) as document:
            return document.metadata


__all__ = [
    "LoaderConfig",
    "PDFDocument",
    "PDFDocumentLoader",
    "PDFPage",
    "is_encryption_error",
    "is_pdf_bytes",
]
