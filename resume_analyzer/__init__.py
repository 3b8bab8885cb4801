"""Top-level package for the resume analysis pipeline."""

from .errors import ResumeAnalyzerError
from .pipeline import AnalysisReport, PDFTextExtractor, ResumeAnalyzer, analyze_resume
from .sanitizer import sanitize
from .schema import ParsedResumeFields
from .scoring import ATSScoringEngine, FallbackScoringStrategy, LocalHeuristicStrategy
from .types import ExtractionResult, ScoreBreakdown

__all__ = [
    "ATSScoringEngine",
    "AnalysisReport",
    "ExtractionResult",
    "FallbackScoringStrategy",
    "LocalHeuristicStrategy",
    "PDFTextExtractor",
    "ParsedResumeFields",
    "ResumeAnalyzer",
    "ResumeAnalyzerError",
    "ScoreBreakdown",
    "analyze_resume",
    "sanitize",
]
