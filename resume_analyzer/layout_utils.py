"""Layout heuristics that rebuild reading-order lines from glyph runs."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .types import DEFAULT_CHAR_WIDTH, GlyphRun, Line

LOGGER = logging.getLogger(__name__)

CLOSING_PUNCTUATION = frozenset(".,!?;:)}]")


@dataclass
class ReconstructionConfig:
    """Tolerances for line reconstruction, in PDF user-space units."""

    y_tolerance: float = 5.0
    # Glue a run to its left neighbour when it starts within this many units
    # of the neighbour's estimated end. None keeps the plain spacing rule.
    join_gap: Optional[float] = None


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _coordinate(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def normalize_runs(raw_items: Iterable[Any]) -> List[GlyphRun]:
    """Convert raw positioned items into :class:`GlyphRun` values.

    Items without text are dropped. Items with text but unusable geometry are
    kept as unpositioned runs so their text still reaches the output.
    """

    runs: List[GlyphRun] = []
    for item in raw_items or []:
        text = _field(item, "text")
        if not isinstance(text, str):
            continue
        text = text.strip()
        if not text:
            continue
        x = _coordinate(_field(item, "x"))
        y = _coordinate(_field(item, "y"))
        if x is None or y is None:
            runs.append(GlyphRun(text=text, estimated_width=len(text) * DEFAULT_CHAR_WIDTH))
            continue
        width = _coordinate(_field(item, "width"))
        if width is None or width < 0:
            width = len(text) * DEFAULT_CHAR_WIDTH
        runs.append(GlyphRun(text=text, x=x, y=y, estimated_width=width))
    return runs


def _needs_space(previous: GlyphRun, current: GlyphRun, config: ReconstructionConfig) -> bool:
    if current.text[0] in CLOSING_PUNCTUATION:
        return False
    if config.join_gap is not None and previous.positioned and current.positioned:
        gap = current.x - previous.right
        if gap <= config.join_gap:
            return False
    return True


def join_runs(runs: List[GlyphRun], config: Optional[ReconstructionConfig] = None) -> str:
    """Concatenate same-line runs, spacing them unless punctuation follows."""

    config = config or ReconstructionConfig()
    parts: List[str] = []
    previous: Optional[GlyphRun] = None
    for run in runs:
        if previous is not None and _needs_space(previous, run, config):
            parts.append(" ")
        parts.append(run.text)
        previous = run
    return "".join(parts)


def _cluster_by_baseline(runs: List[GlyphRun], tolerance: float) -> List[List[GlyphRun]]:
    clusters: List[List[GlyphRun]] = []
    seed_y: Optional[float] = None
    # sorted() is stable, so runs at the same height keep encounter order.
    for run in sorted(runs, key=lambda item: -item.y):
        if seed_y is None or abs(run.y - seed_y) > tolerance:
            clusters.append([])
            seed_y = run.y
        clusters[-1].append(run)
    return [sorted(cluster, key=lambda item: item.x) for cluster in clusters]


def reconstruct_lines(
    runs: List[GlyphRun], config: Optional[ReconstructionConfig] = None
) -> List[Line]:
    """Group runs into lines ordered top to bottom, runs left to right."""

    config = config or ReconstructionConfig()
    if not runs:
        return []

    positioned = [run for run in runs if run.positioned]
    if not positioned:
        LOGGER.debug("No positioned runs; emitting %s runs as one line", len(runs))
        return [Line(runs=list(runs), text=join_runs(runs, config))]

    clusters = _cluster_by_baseline(positioned, config.y_tolerance)
    line_of: Dict[int, int] = {}
    for index, cluster in enumerate(clusters):
        for run in cluster:
            line_of[id(run)] = index

    # Unpositioned runs follow the line of the nearest preceding positioned run.
    current_line = 0
    for run in runs:
        if run.positioned:
            current_line = line_of[id(run)]
        else:
            clusters[current_line].append(run)

    return [Line(runs=cluster, text=join_runs(cluster, config)) for cluster in clusters]


def reconstruct(raw_items: Iterable[Any], config: Optional[ReconstructionConfig] = None) -> List[Line]:
    """Normalize *raw_items* and rebuild them into ordered lines."""

    return reconstruct_lines(normalize_runs(raw_items), config)


def lines_to_text(lines: Iterable[Line]) -> str:
    return "\n".join(line.text for line in lines if line.text)


__all__ = [
    "CLOSING_PUNCTUATION",
    "ReconstructionConfig",
    "join_runs",
    "lines_to_text",
    "normalize_runs",
    "reconstruct",
    "reconstruct_lines",
]
