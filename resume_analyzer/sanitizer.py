"""Canonical plain-text normalization for extracted resume text."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import FrozenSet, Iterable

from .assembly import PAGE_BREAK_MARKER
from .errors import InsufficientTextError

LOGGER = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50

# Typographic characters mapped to ASCII before the printable-ASCII filter.
_TRANSLITERATIONS = {
    "•": "-",  # bullet
    "‣": "-",
    "⁃": "-",
    "▪": "-",
    "▫": "-",
    "■": "-",
    "□": "-",
    "●": "-",
    "◦": "-",
    "▸": "-",
    "►": "-",
    "➢": "-",
    "✓": "-",
    "·": "-",
    "‐": "-",
    "‑": "-",
    "‒": "-",
    "–": "-",
    "—": "-",
    "―": "-",
    "−": "-",
    "‘": "'",
    "’": "'",
    "‚": "'",
    "‛": "'",
    "′": "'",
    "“": '"',
    "”": '"',
    "„": '"',
    "«": '"',
    "»": '"',
}
_TRANSLATION_TABLE = str.maketrans(_TRANSLITERATIONS)

_WHITESPACE_RE = re.compile(r"[^\S\n]|[\x00-\x09\x0b-\x1f\x7f]")
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7e\n]")
_SPACES_RE = re.compile(r" {2,}")
# A period only pulls back when it ends a sentence, so ".NET" or "Node .js" keep their space.
_SPACE_BEFORE_PUNCT_RE = re.compile(
    r" (?=[,!?;:])| (?=\.(?:\s|$|[.,!?;:)\]}'\"]|[A-Z][a-z]))"
)
_GLUED_SENTENCE_RE = re.compile(r"(?<=[a-z0-9)][a-z0-9)])([.!?])(?=[A-Z][a-z])")


def _looks_like_address(token: str) -> bool:
    lowered = token.lower()
    return "@" in token or "://" in token or lowered.startswith("www.")


def _split_glued_sentences(line: str) -> str:
    tokens = line.split(" ")
    return " ".join(
        token if _looks_like_address(token) else _GLUED_SENTENCE_RE.sub(r"\1 ", token)
        for token in tokens
    )


def _to_ascii(text: str) -> str:
    text = unicodedata.normalize("NFKC", text).translate(_TRANSLATION_TABLE)
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _clean_line(line: str) -> str:
    line = _SPACES_RE.sub(" ", line).strip()
    line = _SPACE_BEFORE_PUNCT_RE.sub("", line)
    return _split_glued_sentences(line)


def _normalize(text: str) -> str:
    text = _to_ascii(text)
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n\n")
    text = _WHITESPACE_RE.sub(" ", text)
    return _NON_PRINTABLE_RE.sub("", text)


def _marker_lines(markers: Iterable[str]) -> FrozenSet[str]:
    cleaned = (_clean_line(_normalize(marker)) for marker in (PAGE_BREAK_MARKER, *markers) if marker)
    return frozenset(line for line in cleaned if line)


def sanitize(raw: str, markers: Iterable[str] = ()) -> str:
    """Return the canonical plain-text form of *raw*.

    Lines are kept; runs of blank lines become exactly one blank line. Output
    is printable ASCII plus newlines. Lines equal to :data:`PAGE_BREAK_MARKER`
    or to any of *markers* (compared after cleaning) are dropped.
    ``sanitize(sanitize(x)) == sanitize(x)``.
    """

    if not raw:
        return ""

    drop = _marker_lines(markers)
    lines = []
    pending_blank = False
    for line in _normalize(raw).split("\n"):
        line = _clean_line(line)
        if not line or line in drop:
            pending_blank = bool(lines)
            continue
        if pending_blank:
            lines.append("")
            pending_blank = False
        lines.append(line)
    return "\n".join(lines)


def is_sufficient(text: str, minimum: int = MIN_TEXT_LENGTH) -> bool:
    return len(text or "") >= minimum


def require_minimum_text(text: str, minimum: int = MIN_TEXT_LENGTH) -> str:
    """Return *text* unchanged, or raise when it is too short to be a resume."""

    if not is_sufficient(text, minimum):
        length = len(text or "")
        LOGGER.warning("Sanitized text too short: %s characters", length)
        raise InsufficientTextError(length, minimum)
    return text


__all__ = ["MIN_TEXT_LENGTH", "is_sufficient", "require_minimum_text", "sanitize"]
