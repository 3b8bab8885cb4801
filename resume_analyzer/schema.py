"""Structured resume fields handed in by the text-to-structure collaborator.

Every field is optional. ``from_dict`` never raises: unknown keys are
dropped, scalars are stringified and trimmed, and malformed entries are
skipped so scoring can treat them as zero contribution.
"""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

T = TypeVar("T")

_YEAR_PATTERN = re.compile(r"(19|20)\d{2}")


def _normalize_present(value: Optional[str]) -> Optional[str]:
    if value is not None and value.strip().lower() in {"present", "current", "now", "ongoing"}:
        return "Present"
    return value


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


def _as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    items = (_as_text(item) for item in value)
    return [item for item in items if item]


def _ensure_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _build(cls: Type[T], payload: Any) -> Optional[T]:
    """Instantiate dataclass *cls* from *payload*, coercing field types."""

    if not isinstance(payload, dict):
        return None
    values: Dict[str, Any] = {}
    for entry in fields(cls):
        if entry.name not in payload:
            continue
        raw = payload[entry.name]
        if entry.type in ("List[str]", List[str]):
            values[entry.name] = _as_text_list(raw)
        else:
            values[entry.name] = _as_text(raw)
    return cls(**values)


def _build_list(cls: Type[T], payload: Any) -> List[T]:
    if not isinstance(payload, list):
        return []
    built = (_build(cls, entry) for entry in payload)
    return [entry for entry in built if entry is not None]


def _year(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = _YEAR_PATTERN.search(value)
    return int(match.group(0)) if match else None


@dataclass
class PersonalData:
    """Contact details of the candidate."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    portfolio: Optional[str] = None


@dataclass
class Experience:
    """Professional experience item."""

    company: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None
    responsibilities: List[str] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.end_date = _normalize_present(self.end_date)

    @property
    def has_dates(self) -> bool:
        return bool(self.start_date and self.end_date)


@dataclass
class Project:
    name: Optional[str] = None
    description: Optional[str] = None
    technologies: List[str] = field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        self.end_date = _normalize_present(self.end_date)


@dataclass
class Skills:
    """Skills grouped by category."""

    technical: List[str] = field(default_factory=list)
    soft: List[str] = field(default_factory=list)
    languages: List[str] = field(default_factory=list)
    tools: List[str] = field(default_factory=list)

    def categories(self) -> Dict[str, List[str]]:
        return {entry.name: getattr(self, entry.name) for entry in fields(self)}


@dataclass
class ResearchWork:
    title: Optional[str] = None
    description: Optional[str] = None
    publication_date: Optional[str] = None
    url: Optional[str] = None
    collaborators: List[str] = field(default_factory=list)


@dataclass
class Education:
    """Education entry with institution and degree information."""

    institution: Optional[str] = None
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    gpa: Optional[str] = None
    location: Optional[str] = None

    def __post_init__(self) -> None:
        self.end_date = _normalize_present(self.end_date)


@dataclass
class Achievement:
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    organization: Optional[str] = None


@dataclass
class ParsedResumeFields:
    """Top-level structured resume representation."""

    personal_data: PersonalData = field(default_factory=PersonalData)
    experiences: List[Experience] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    skills: Skills = field(default_factory=Skills)
    research_work: List[ResearchWork] = field(default_factory=list)
    achievements: List[Achievement] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Any) -> "ParsedResumeFields":
        payload = _ensure_dict(payload)
        return cls(
            personal_data=_build(PersonalData, payload.get("personal_data")) or PersonalData(),
            experiences=_build_list(Experience, payload.get("experiences")),
            projects=_build_list(Project, payload.get("projects")),
            skills=_build(Skills, payload.get("skills")) or Skills(),
            research_work=_build_list(ResearchWork, payload.get("research_work")),
            achievements=_build_list(Achievement, payload.get("achievements")),
            education=_build_list(Education, payload.get("education")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def json(self, indent: int = 2, ensure_ascii: bool = False) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=ensure_ascii)

    def all_skills(self) -> List[str]:
        """Distinct skills across all categories, first spelling wins."""

        seen = set()
        distinct: List[str] = []
        for skills in self.skills.categories().values():
            for skill in skills:
                key = skill.lower()
                if key in seen:
                    continue
                seen.add(key)
                distinct.append(skill)
        return distinct

    def total_experience_years(self, current_year: Optional[int] = None) -> int:
        """Sum of whole years across experiences; open-ended roles run to *current_year*."""

        if current_year is None:
            current_year = datetime.now().year
        total = 0
        for experience in self.experiences:
            start = _year(experience.start_date)
            if start is None:
                continue
            if experience.end_date in (None, "Present"):
                end: Optional[int] = current_year
            else:
                end = _year(experience.end_date)
            if end is not None and end >= start:
                total += end - start
        return total


def coerce_fields(value: Any) -> Optional[ParsedResumeFields]:
    """Accept a :class:`ParsedResumeFields`, a raw mapping, or nothing."""

    if value is None or isinstance(value, ParsedResumeFields):
        return value
    return ParsedResumeFields.from_dict(value)


def distinct_strings(values: Iterable[Any]) -> List[str]:
    seen = set()
    distinct: List[str] = []
    for value in values or []:
        text = _as_text(value)
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        distinct.append(text)
    return distinct


__all__ = [
    "Achievement",
    "Education",
    "Experience",
    "ParsedResumeFields",
    "PersonalData",
    "Project",
    "ResearchWork",
    "Skills",
    "coerce_fields",
    "distinct_strings",
]
