"""Assemble per-page reconstructed text into a document-level result."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Optional

from .errors import EmptyDocumentError, ExtractionCancelledError, NoExtractableTextError
from .ingestion import is_encryption_error
from .layout_utils import ReconstructionConfig, reconstruct
from .types import ExtractionResult, Page

LOGGER = logging.getLogger(__name__)

PAGE_BREAK_MARKER = "--- Page Break ---"
PAGE_SEPARATOR = "\n\n"


class PageTextAssembler:
    """Reconstruct every page of a document and join them in page order.

    *document* is anything exposing ``page_count`` and ``get_page(n)`` whose
    pages provide ``text_items()``; see :class:`~.ingestion.PDFDocument`.
    """

    def __init__(
        self,
        config: Optional[ReconstructionConfig] = None,
        page_break_marker: Optional[str] = None,
    ) -> None:
        self.config = config or ReconstructionConfig()
        self.page_break_marker = page_break_marker

    def build_page(self, document: Any, number: int) -> Page:
        handle = document.get_page(number)
        lines = reconstruct(handle.text_items(), self.config)
        return Page(page_number=number, lines=lines)

    def _separator(self) -> str:
        if self.page_break_marker:
            return f"{PAGE_SEPARATOR}{self.page_break_marker}{PAGE_SEPARATOR}"
        return PAGE_SEPARATOR

    def assemble_pages(self, pages: Iterable[Page]) -> str:
        return self._separator().join(page.text for page in pages if page.has_text)

    def assemble(
        self, document: Any, cancel_event: Optional[threading.Event] = None
    ) -> ExtractionResult:
        """Return the joined text of all pages that yielded at least one line.

        Raises:
            EmptyDocumentError: If the document reports no pages.
            NoExtractableTextError: If no page produced any text.
            ExtractionCancelledError: If *cancel_event* is set between pages.
        """

        page_count = int(document.page_count)
        if page_count <= 0:
            raise EmptyDocumentError("document has no pages")

        pages: List[Page] = []
        encrypted_failure = False
        for number in range(1, page_count + 1):
            if cancel_event is not None and cancel_event.is_set():
                LOGGER.info("Extraction cancelled before page %s", number)
                raise ExtractionCancelledError(f"cancelled before page {number}")
            try:
                page = self.build_page(document, number)
            except Exception as error:
                LOGGER.warning("Error extracting page %s: %s", number, error)
                encrypted_failure = encrypted_failure or is_encryption_error(error)
                continue
            if not page.has_text:
                LOGGER.debug("Page %s yielded no lines", number)
                continue
            LOGGER.debug("Page %s extracted %s lines", number, len(page.lines))
            pages.append(page)

        pages_processed = len(pages)
        pages_failed = page_count - pages_processed
        if pages_processed == 0:
            encrypted = encrypted_failure or bool(getattr(document, "is_encrypted", False))
            hint = "encrypted" if encrypted else "scanned"
            raise NoExtractableTextError(
                f"no text extracted from {page_count} pages", hint=hint, pages_failed=pages_failed
            )

        LOGGER.info("Extracted text from %s of %s pages", pages_processed, page_count)
        return ExtractionResult(
            text=self.assemble_pages(pages),
            pages_processed=pages_processed,
            pages_failed=pages_failed,
        )


__all__ = ["PAGE_BREAK_MARKER", "PageTextAssembler"]
