"""Rule-based ATS scoring.

Six fixed categories add up to 100 points. Every rule records a
:class:`~.types.RuleResult`; satisfied rules feed ``feedback`` and unsatisfied
ones feed ``recommendations``. Missing structured fields or keywords are
never an error: the rules that need them fall to their lowest band.

:class:`LocalHeuristicStrategy` is the text-only alternative with its own
categories, for callers that have no structured fields at all.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .schema import ParsedResumeFields, coerce_fields, distinct_strings
from .types import RuleResult, ScoreBreakdown

LOGGER = logging.getLogger(__name__)

CATEGORY_WEIGHTS = {
    "format": 20,
    "skills": 25,
    "keywords": 20,
    "role_clarity": 15,
    "chronology": 10,
    "contact": 10,
}

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
# Separators stay on one line so numbers on adjacent lines never merge.
PHONE_PATTERN = re.compile(r"(\+?\d[\d \t().-]{7,}\d)")
BULLET_LINE_PATTERN = re.compile(r"^\s*(?:[-*•‣◦▪►●]|\d{1,2}[.)])\s+\S")
MIN_PHONE_DIGITS = 7
# Free text also holds date ranges such as "2019 - 2021", so a bare match
# there needs a full-length number.
MIN_TEXT_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15

LOCAL_CATEGORY_WEIGHTS = {
    "contact": 20,
    "keywords": 25,
    "structure": 20,
    "achievements": 15,
    "education": 10,
    "formatting": 10,
}
PROFESSIONAL_TERMS = (
    "experience",
    "skills",
    "education",
    "work",
    "project",
    "management",
    "development",
    "analysis",
    "leadership",
    "communication",
    "teamwork",
    "problem-solving",
    "technical",
    "software",
    "programming",
    "data",
)
SECTION_TERMS = ("education", "experience", "skill", "project", "work", "employment")
EDUCATION_TERMS = ("university", "college", "degree", "bachelor", "master", "phd", "certification")
ACHIEVEMENT_PATTERN = re.compile(
    r"\d+%|\d+\+|\$\d+|\d+\s*(?:years?|months?|projects?|clients?|people|team)", re.IGNORECASE
)


@dataclass
class ScoringConfig:
    """Presentation caps and length thresholds."""

    max_feedback: int = 5
    max_recommendations: int = 3
    min_length: int = 300
    full_skill_count: int = 5
    full_keyword_count: int = 10
    partial_keyword_count: int = 5


def _phone_like(value: Optional[str], min_digits: int = MIN_PHONE_DIGITS) -> bool:
    if not value:
        return False
    for match in PHONE_PATTERN.finditer(value):
        digits = sum(char.isdigit() for char in match.group(0))
        if min_digits <= digits <= MAX_PHONE_DIGITS:
            return True
    return False


def _extract_name(lines: List[str]) -> Optional[str]:
    for line in lines[:3]:
        candidate = line.strip()
        if not candidate:
            continue
        if any(symbol in candidate for symbol in ("@", "+", "http")) or any(ch.isdigit() for ch in candidate):
            continue
        words = candidate.split()
        if 1 < len(words) <= 5 and all(word[:1].isupper() for word in words):
            return candidate
    return None


class _RuleLog:
    """Collects rule outcomes and per-category points for one scoring call."""

    def __init__(self, weights: Dict[str, int] = CATEGORY_WEIGHTS) -> None:
        self.components: Dict[str, int] = {category: 0 for category in weights}
        self.rules: List[RuleResult] = []

    def award(self, category: str, rule: str, points: int, message: str) -> None:
        self.components[category] += points
        self.rules.append(RuleResult(category, rule, points, True, message))

    def miss(self, category: str, rule: str, message: str, points: int = 0) -> None:
        self.components[category] += points
        self.rules.append(RuleResult(category, rule, points, False, message))

    def breakdown(self, config: ScoringConfig) -> ScoreBreakdown:
        feedback = [rule.message for rule in self.rules if rule.satisfied]
        recommendations = [rule.message for rule in self.rules if not rule.satisfied]
        return ScoreBreakdown(
            total=max(0, min(100, sum(self.components.values()))),
            components=self.components,
            feedback=feedback[: config.max_feedback],
            recommendations=recommendations[: config.max_recommendations],
            rules=self.rules,
        )


class ScoringStrategy:
    """Contract shared by every way of producing a :class:`ScoreBreakdown`."""

    name = "base"

    def score(
        self,
        text: str,
        parsed_fields: Any = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> ScoreBreakdown:
        raise NotImplementedError


class ATSScoringEngine(ScoringStrategy):
    """Deterministic, weighted rule evaluation over canonical text."""

    name = "rules"

    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig()

    def score(
        self,
        text: str,
        parsed_fields: Any = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> ScoreBreakdown:
        text = text or ""
        fields = coerce_fields(parsed_fields) or ParsedResumeFields()
        if isinstance(keywords, str):
            keywords = [keywords]
        log = _RuleLog()

        self._score_format(log, text, fields)
        self._score_skills(log, fields)
        self._score_keywords(log, distinct_strings(keywords or []))
        self._score_role_clarity(log, fields)
        self._score_chronology(log, fields)
        self._score_contact(log, text, fields)

        LOGGER.debug("ATS components: %s", log.components)
        return log.breakdown(self.config)

    def _score_format(self, log: _RuleLog, text: str, fields: ParsedResumeFields) -> None:
        if len(text) > self.config.min_length:
            log.award("format", "length", 5, "Adequate content length")
        else:
            log.miss("format", "length", "Expand your resume content for better impact")

        if any(BULLET_LINE_PATTERN.match(line) for line in text.splitlines()):
            log.award("format", "bullets", 5, "Good use of bullet points")
        else:
            log.miss("format", "bullets", "Use bullet points to improve readability")

        if fields.experiences:
            log.award("format", "experience_section", 5, "Experience section present")
        else:
            log.miss("format", "experience_section", "Add a work experience section")

        if fields.education:
            log.award("format", "education_section", 5, "Education section included")
        else:
            log.miss("format", "education_section", "Add an education section")

    def _score_skills(self, log: _RuleLog, fields: ParsedResumeFields) -> None:
        count = len(fields.all_skills())
        if count >= self.config.full_skill_count:
            log.award("skills", "skill_count", 15, f"{count} skills listed")
        elif count > 0:
            log.award("skills", "skill_count", 8, f"{count} skills found")
            log.miss("skills", "skill_count_full", "Add more relevant technical skills")
        else:
            log.miss("skills", "skill_count", "Include a comprehensive skills section")

        if fields.skills.technical:
            log.award("skills", "technical", 10, "Technical skills identified")
        else:
            log.miss("skills", "technical", "Add specific technical skills for your field")

    def _score_keywords(self, log: _RuleLog, keywords: List[str]) -> None:
        count = len(keywords)
        if count >= self.config.full_keyword_count:
            log.award("keywords", "keyword_count", 20, "Rich keyword content detected")
        elif count >= self.config.partial_keyword_count:
            log.award("keywords", "keyword_count", 12, "Good keyword presence")
            log.miss("keywords", "keyword_count_full", "Include more industry-specific keywords")
        else:
            log.miss(
                "keywords",
                "keyword_count",
                "Add more relevant keywords from job descriptions",
                points=5,
            )

    def _score_role_clarity(self, log: _RuleLog, fields: ParsedResumeFields) -> None:
        if any(experience.position for experience in fields.experiences):
            log.award("role_clarity", "job_titles", 8, "Job titles clearly stated")
        else:
            log.miss("role_clarity", "job_titles", "Clearly state your job titles and roles")

        if any(experience.responsibilities for experience in fields.experiences):
            log.award("role_clarity", "responsibilities", 7, "Job responsibilities described")
        else:
            log.miss("role_clarity", "responsibilities", "Add detailed job responsibilities")

    def _score_chronology(self, log: _RuleLog, fields: ParsedResumeFields) -> None:
        if any(experience.has_dates for experience in fields.experiences):
            log.award("chronology", "dated_experience", 10, "Work timeline provided")
        else:
            log.miss("chronology", "dated_experience", "Include start and end dates for positions")

    def _score_contact(self, log: _RuleLog, text: str, fields: ParsedResumeFields) -> None:
        personal = fields.personal_data
        email = personal.email if personal.email and "@" in personal.email else None
        if email is None:
            match = EMAIL_PATTERN.search(text)
            email = match.group(0) if match else None
        if email:
            log.award("contact", "email", 5, "Valid email address found")
        else:
            log.miss("contact", "email", "Include a professional email address")

        if _phone_like(personal.phone) or _phone_like(text, MIN_TEXT_PHONE_DIGITS):
            log.award("contact", "phone", 3, "Phone number included")
        else:
            log.miss("contact", "phone", "Add your phone number")

        if personal.name or _extract_name(text.splitlines()):
            log.award("contact", "name", 2, "Name clearly displayed")
        else:
            log.miss("contact", "name", "Put your full name at the top of the resume")


class LocalHeuristicStrategy(ScoringStrategy):
    """Text-only scoring for when no structured fields are available.

    Looks for contact details, common professional terms, standard section
    names, quantified achievements, education terms and a reasonable length.
    ``parsed_fields`` and ``keywords`` are accepted and ignored.
    """

    name = "local"

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        min_length: int = 500,
        max_length: int = 3000,
        min_lines: int = 10,
    ) -> None:
        self.config = config or ScoringConfig()
        self.min_length = min_length
        self.max_length = max_length
        self.min_lines = min_lines

    def score(
        self,
        text: str,
        parsed_fields: Any = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> ScoreBreakdown:
        text = text or ""
        lowered = text.lower()
        log = _RuleLog(LOCAL_CATEGORY_WEIGHTS)

        if EMAIL_PATTERN.search(text):
            log.award("contact", "email", 10, "Contact information includes email address")
        else:
            log.miss("contact", "email", "Add a professional email address")
        if _phone_like(text, MIN_TEXT_PHONE_DIGITS):
            log.award("contact", "phone", 10, "Contact information includes phone number")
        else:
            log.miss("contact", "phone", "Add a phone number for easy contact")

        terms = [term for term in PROFESSIONAL_TERMS if term in lowered]
        points = min(LOCAL_CATEGORY_WEIGHTS["keywords"], len(terms) * 2)
        if len(terms) > 5:
            log.award("keywords", "professional_terms", points, f"{len(terms)} professional terms found")
        else:
            log.miss(
                "keywords",
                "professional_terms",
                "Include more industry-specific keywords and skills",
                points=points,
            )

        sections = [section for section in SECTION_TERMS if section in lowered]
        points = min(LOCAL_CATEGORY_WEIGHTS["structure"], len(sections) * 4)
        if len(sections) >= 3:
            log.award("structure", "sections", points, "Well-organized with clear sections")
        else:
            log.miss(
                "structure",
                "sections",
                "Include standard sections: Education, Experience, Skills, Projects",
                points=points,
            )

        if ACHIEVEMENT_PATTERN.search(text):
            log.award("achievements", "quantified", 15, "Includes measurable accomplishments")
        else:
            log.miss(
                "achievements",
                "quantified",
                "Add numbers, percentages, and measurable results to your achievements",
            )

        if any(term in lowered for term in EDUCATION_TERMS):
            log.award("education", "background", 10, "Educational background is clearly stated")
        else:
            log.miss("education", "background", "Include your educational background and certifications")

        if self.min_length < len(text) < self.max_length:
            log.award("formatting", "length", 5, "Resume has appropriate length")
        elif len(text) <= self.min_length:
            log.miss("formatting", "length", "Expand your resume with more detail on your experience")
        else:
            log.miss("formatting", "length", "Consider condensing your resume to 1-2 pages")

        if len(text.splitlines()) > self.min_lines:
            log.award("formatting", "line_structure", 5, "Good use of formatting and structure")
        else:
            log.miss("formatting", "line_structure", "Use bullet points and clear formatting to improve readability")

        LOGGER.debug("Local heuristic components: %s", log.components)
        return log.breakdown(self.config)


class FallbackScoringStrategy(ScoringStrategy):
    """Try *primary*; on any non-input failure score with *fallback*."""

    name = "fallback"

    def __init__(self, primary: ScoringStrategy, fallback: Optional[ScoringStrategy] = None) -> None:
        self.primary = primary
        self.fallback = fallback or ATSScoringEngine()

    def score(
        self,
        text: str,
        parsed_fields: Any = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> ScoreBreakdown:
        try:
            return self.primary.score(text, parsed_fields, keywords)
        except Exception as error:
            if getattr(error, "is_input_error", False):
                raise
            LOGGER.warning(
                "%s scoring failed, using %s: %s", self.primary.name, self.fallback.name, error
            )
        return self.fallback.score(text, parsed_fields, keywords)


def score_resume(
    text: str,
    parsed_fields: Any = None,
    keywords: Optional[Sequence[str]] = None,
) -> ScoreBreakdown:
    """Score *text* with the default rule-based engine."""

    return ATSScoringEngine().score(text, parsed_fields, keywords)


__all__ = [
    "ATSScoringEngine",
    "CATEGORY_WEIGHTS",
    "FallbackScoringStrategy",
    "LOCAL_CATEGORY_WEIGHTS",
    "LocalHeuristicStrategy",
    "ScoringConfig",
    "ScoringStrategy",
    "score_resume",
]
