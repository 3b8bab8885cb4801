"""Common data structures used across the resume analysis pipeline.

Positions follow PDF user space: the origin is the bottom-left corner of the
page, ``x`` grows to the right and ``y`` grows upward, so a run further down
the page has a *smaller* ``y``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

# Width estimate per character when a run carries no bounding box.
DEFAULT_CHAR_WIDTH = 6.0


@dataclass(frozen=True)
class GlyphRun:
    """A contiguous span of text reported at a single page position."""

    text: str
    x: Optional[float] = None
    y: Optional[float] = None
    estimated_width: float = 0.0

    @property
    def positioned(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def right(self) -> Optional[float]:
        if self.x is None:
            return None
        return self.x + self.estimated_width


@dataclass
class Line:
    """Runs sharing one baseline cluster, ordered left to right."""

    runs: List[GlyphRun] = field(default_factory=list)
    text: str = ""

    @property
    def y(self) -> Optional[float]:
        for run in self.runs:
            if run.y is not None:
                return run.y
        return None


@dataclass
class Page:
    """Reconstructed lines of a single page, ordered top to bottom."""

    page_number: int
    lines: List[Line] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines if line.text)

    @property
    def has_text(self) -> bool:
        return any(line.text.strip() for line in self.lines)


@dataclass(frozen=True)
class ExtractionResult:
    """Output of the extraction pipeline."""

    text: str
    pages_processed: int
    pages_failed: int

    @property
    def page_count(self) -> int:
        return self.pages_processed + self.pages_failed

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RuleResult:
    """Outcome of a single scoring rule."""

    category: str
    rule: str
    points: int
    satisfied: bool
    message: str


@dataclass
class ScoreBreakdown:
    """Weighted ATS score with explainable per-category detail."""

    total: int
    components: Dict[str, int] = field(default_factory=dict)
    feedback: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    rules: List[RuleResult] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "components": dict(self.components),
            "feedback": list(self.feedback),
            "recommendations": list(self.recommendations),
            "strengths": self.strengths,
            "weaknesses": self.weaknesses,
            "rules": [asdict(rule) for rule in self.rules],
        }

    @property
    def strengths(self) -> List[str]:
        """Messages of every satisfied rule, uncapped."""

        return [rule.message for rule in self.rules if rule.satisfied]

    @property
    def weaknesses(self) -> List[str]:
        return [rule.message for rule in self.rules if not rule.satisfied]
