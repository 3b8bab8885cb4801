"""Contracts with the language-model collaborator.

The library never decides how or where a model runs. It builds prompts,
parses whatever text comes back into its own types, and accepts an optional
``client(prompt) -> str`` callable supplied by the host.
"""

from __future__ import annotations

import json
import logging
import os
import textwrap
from typing import Any, Callable, List, Optional, Sequence, Tuple
from urllib import request

from .schema import ParsedResumeFields, distinct_strings
from .scoring import ScoringStrategy
from .types import ScoreBreakdown

LOGGER = logging.getLogger(__name__)

CompletionClient = Callable[[str], str]

RESUME_SCHEMA_TEMPLATE = {
    "personal_data": {
        "name": "",
        "email": "",
        "phone": "",
        "location": "",
        "linkedin": "",
        "portfolio": "",
    },
    "experiences": [
        {
            "company": "",
            "position": "",
            "start_date": "",
            "end_date": "",
            "location": "",
            "responsibilities": [],
            "achievements": [],
        }
    ],
    "projects": [
        {
            "name": "",
            "description": "",
            "technologies": [],
            "start_date": "",
            "end_date": "",
            "url": "",
        }
    ],
    "skills": {"technical": [], "soft": [], "languages": [], "tools": []},
    "research_work": [
        {
            "title": "",
            "description": "",
            "publication_date": "",
            "url": "",
            "collaborators": [],
        }
    ],
    "achievements": [{"title": "", "description": "", "date": "", "organization": ""}],
    "education": [
        {
            "institution": "",
            "degree": "",
            "field_of_study": "",
            "start_date": "",
            "end_date": "",
            "gpa": "",
            "location": "",
        }
    ],
}

PARSING_PROMPT_TEMPLATE = textwrap.dedent(
    """
    You are a JSON extraction engine. Convert the following resume text into precisely the JSON schema specified below.
    - Do not compose any extra fields or commentary.
    - Do not make up values for any fields.
    - Use "Present" if an end date is ongoing.
    - Make sure dates are in YYYY-MM-DD format when possible.
    - Do not format the response in Markdown or any other format. Just output raw JSON.

    Schema:
    {schema}

    Resume:
    {resume_text}

    NOTE: Please output only a valid JSON matching the EXACT schema.
    """
)

KEYWORD_PROMPT_TEMPLATE = textwrap.dedent(
    """
    Extract relevant keywords from the following resume text. Focus on:
    - Technical skills
    - Job titles and roles
    - Industry terms
    - Tools and technologies
    - Soft skills
    - Certifications

    Return only a JSON object with an "extracted_keywords" array:
    {{"extracted_keywords": ["keyword1", "keyword2", ...]}}

    Resume text: {resume_text}
    """
)

ANALYSIS_PROMPT_TEMPLATE = textwrap.dedent(
    """
    You are an expert ATS (Applicant Tracking System) and resume reviewer. Analyze the following CV and provide:

    1. An ATS compatibility score (0-100)
    2. Specific feedback points for improvement
    3. Concrete suggestions

    CV Content:
    {resume_text}

    Respond with JSON only, using this structure:
    {{"score": number, "feedback": ["..."], "suggestions": ["..."]}}

    Focus on ATS compatibility and keyword optimization, formatting and structure,
    quantifiable achievements, skills relevance and contact information completeness.
    """
)

REFORMAT_SYSTEM_TEMPLATE = textwrap.dedent(
    """
    You are an expert resume formatter. Your task is to reformat the provided resume text according to the specific template requirements while preserving all factual information.

    Rules:
    1. Keep all dates, names, companies, and factual details exactly as provided
    2. Improve formatting, structure, and presentation
    3. Enhance language to be more professional and impactful
    4. Add appropriate sections and headings
    5. Use bullet points and proper formatting
    6. Do not invent new information
    7. Focus on the {template_name} template style

    Template-specific instructions: {instructions}
    """
)


def _strip_code_fence(response: str) -> str:
    candidate = (response or "").strip()
    if candidate.startswith("```"):
        candidate = candidate.strip("`").strip()
        if candidate.lower().startswith("json"):
            candidate = candidate[4:]
    return candidate.strip()


def _load_json(response: str) -> Any:
    return json.loads(_strip_code_fence(response))


def build_parsing_prompt(resume_text: str) -> str:
    schema = json.dumps(RESUME_SCHEMA_TEMPLATE, indent=2)
    return PARSING_PROMPT_TEMPLATE.format(schema=schema, resume_text=resume_text)


def build_keyword_prompt(resume_text: str) -> str:
    return KEYWORD_PROMPT_TEMPLATE.format(resume_text=resume_text)


def build_analysis_prompt(resume_text: str) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(resume_text=resume_text)


def build_reformat_prompt(
    resume_text: str, template_name: str, instructions: str = ""
) -> Tuple[str, str]:
    """Return the ``(system, user)`` prompts for rewriting a resume."""

    system = REFORMAT_SYSTEM_TEMPLATE.format(
        template_name=template_name, instructions=instructions or "none"
    )
    user = f"Please reformat this resume:\n\n{resume_text}"
    return system.strip(), user


def parse_fields_response(response: str) -> ParsedResumeFields:
    """Turn the collaborator's JSON reply into fields; bad replies yield empty fields."""

    try:
        payload = _load_json(response)
    except json.JSONDecodeError as error:
        LOGGER.warning("Failed to parse resume fields JSON: %s", error)
        return ParsedResumeFields()
    return ParsedResumeFields.from_dict(payload)


def parse_keywords_response(response: str) -> List[str]:
    try:
        payload = _load_json(response)
    except json.JSONDecodeError as error:
        LOGGER.warning("Failed to parse keywords JSON: %s", error)
        return []
    if isinstance(payload, dict):
        payload = payload.get("extracted_keywords")
    if not isinstance(payload, list):
        return []
    return distinct_strings(payload)


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


class RemoteScoringStrategy(ScoringStrategy):
    """Ask the collaborator model for an overall score.

    Raises ``ValueError`` on unusable output so a
    :class:`~.scoring.FallbackScoringStrategy` can take over.
    """

    name = "remote"

    def __init__(self, client: CompletionClient, max_feedback: int = 5, max_recommendations: int = 3) -> None:
        self.client = client
        self.max_feedback = max_feedback
        self.max_recommendations = max_recommendations

    def score(
        self,
        text: str,
        parsed_fields: Any = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> ScoreBreakdown:
        response = self.client(build_analysis_prompt(text))
        if not response:
            raise ValueError("no response from remote analysis")
        payload = _load_json(response)
        if not isinstance(payload, dict):
            raise ValueError("remote analysis did not return an object")
        try:
            raw_score = float(payload.get("score"))
        except (TypeError, ValueError) as error:
            raise ValueError("remote analysis returned no numeric score") from error
        total = max(0, min(100, int(round(raw_score))))
        suggestions = _string_list(payload.get("suggestions"))
        details = payload.get("detailedAnalysis")
        if not suggestions and isinstance(details, dict):
            suggestions = _string_list(details.get("suggestions"))
        return ScoreBreakdown(
            total=total,
            components={"overall": total},
            feedback=_string_list(payload.get("feedback"))[: self.max_feedback],
            recommendations=suggestions[: self.max_recommendations],
        )


def completion_client_from_env() -> Optional[CompletionClient]:
    """Build an HTTP completion client from ``RESUME_ANALYZER_LLM_ENDPOINT``.

    The endpoint receives ``{"prompt": ...}`` and may answer with plain text
    or JSON carrying ``output``/``response``. Returns None when unconfigured.
    """

    endpoint = os.getenv("RESUME_ANALYZER_LLM_ENDPOINT")
    if not endpoint:
        return None
    timeout = float(os.getenv("RESUME_ANALYZER_LLM_TIMEOUT", "60"))

    def _call(prompt: str) -> str:
        body = json.dumps({"prompt": prompt}).encode("utf-8")
        req = request.Request(
            endpoint,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with request.urlopen(req, timeout=timeout) as response:
            content_type = response.headers.get("Content-Type", "")
            payload = response.read().decode("utf-8")
        if "application/json" in content_type:
            data = json.loads(payload)
            if isinstance(data, dict):
                return str(data.get("output") or data.get("response") or "")
        return payload

    return _call


__all__ = [
    "RESUME_SCHEMA_TEMPLATE",
    "RemoteScoringStrategy",
    "build_analysis_prompt",
    "build_keyword_prompt",
    "build_parsing_prompt",
    "build_reformat_prompt",
    "completion_client_from_env",
    "parse_fields_response",
    "parse_keywords_response",
]
