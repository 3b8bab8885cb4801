"""End-to-end resume analysis pipeline."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .assembly import PageTextAssembler
from .errors import LoadFailedError
from .ingestion import SEARCHABLE_PAGES, PDFDocumentLoader
from .sanitizer import require_minimum_text, sanitize
from .scoring import ATSScoringEngine, ScoringStrategy
from .types import ExtractionResult, ScoreBreakdown

LOGGER = logging.getLogger(__name__)


class PDFTextExtractor:
    """Turn PDF bytes into canonical text.

    Holds only configuration, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        loader: Optional[PDFDocumentLoader] = None,
        assembler: Optional[PageTextAssembler] = None,
    ) -> None:
        self.loader = loader or PDFDocumentLoader()
        self.assembler = assembler or PageTextAssembler()

    def extract(self, data: bytes, cancel_event: Optional[threading.Event] = None) -> ExtractionResult:
        LOGGER.info("Extracting text from %s byte PDF", len(data))
        document = self.loader.load(data, cancel_event=cancel_event)
        try:
            raw = self.assembler.assemble(document, cancel_event=cancel_event)
        finally:
            document.close()
        markers = [self.assembler.page_break_marker] if self.assembler.page_break_marker else []
        text = require_minimum_text(sanitize(raw.text, markers=markers))
        LOGGER.debug("Canonical text has %s characters", len(text))
        return replace(raw, text=text)

    def extract_file(self, file_path: str, cancel_event: Optional[threading.Event] = None) -> ExtractionResult:
        return self.extract(Path(file_path).expanduser().read_bytes(), cancel_event=cancel_event)

    def is_searchable(self, data: bytes, pages_to_check: int = SEARCHABLE_PAGES) -> bool:
        """Quick pre-check: does the PDF carry a text layer at all?

        Input errors still raise; a document that cannot be opened is reported
        as not searchable.
        """

        try:
            document = self.loader.load(data)
        except LoadFailedError as error:
            LOGGER.warning("Searchability check could not open PDF: %s", error)
            return False
        with document:
            return document.is_searchable(pages_to_check)


@dataclass
class AnalysisReport:
    """Extraction outcome plus its ATS score."""

    extraction: ExtractionResult
    score: ScoreBreakdown

    def to_dict(self) -> Dict[str, Any]:
        return {"extraction": self.extraction.to_dict(), "score": self.score.to_dict()}


class ResumeAnalyzer:
    """High-level orchestrator: extract, sanitize, score."""

    def __init__(
        self,
        extractor: Optional[PDFTextExtractor] = None,
        scorer: Optional[ScoringStrategy] = None,
    ) -> None:
        self.extractor = extractor or PDFTextExtractor()
        self.scorer = scorer or ATSScoringEngine()

    def score_text(
        self,
        text: str,
        parsed_fields: Any = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> ScoreBreakdown:
        """Score text obtained elsewhere (DOCX, plain text) the same way as PDFs."""

        canonical = sanitize(text)
        LOGGER.info("Scoring resume text with %s strategy", self.scorer.name)
        return self.scorer.score(canonical, parsed_fields, keywords)

    def analyze(
        self,
        data: bytes,
        parsed_fields: Any = None,
        keywords: Optional[Sequence[str]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> AnalysisReport:
        extraction = self.extractor.extract(data, cancel_event=cancel_event)
        LOGGER.info("Scoring resume text with %s strategy", self.scorer.name)
        score = self.scorer.score(extraction.text, parsed_fields, keywords)
        return AnalysisReport(extraction=extraction, score=score)


def analyze_resume(
    file_path: str,
    parsed_fields: Any = None,
    keywords: Optional[Sequence[str]] = None,
) -> AnalysisReport:
    """Convenience function to extract and score a PDF resume on disk."""

    analyzer = ResumeAnalyzer()
    data = Path(file_path).expanduser().resolve().read_bytes()
    return analyzer.analyze(data, parsed_fields=parsed_fields, keywords=keywords)
