"""
Requirement Interpreter - free text to StructuredRequirement

Accepts anything from a short phrase ("GPS tracking, Hyderabad, 3+ yrs")
to a full job description and returns normalized matching criteria.

Contract:
    - ``raw_text`` is always the verbatim input
    - every other field is independently optional (None = no constraint)
    - parse() never raises; when the collaborator is unavailable or its
      response is malformed the result carries ``raw_text`` only, and
      downstream matching falls back to text-only

Implementations:
    - LLMRequirementInterpreter: prompt a TextGenerator for JSON
    - KeywordRequirementInterpreter: deterministic vocabulary matching
"""

import json
import logging
import re
from typing import Any, Optional, Protocol

from hirewise.exceptions import GenerationUnavailable
from hirewise.middleware.metrics import record_interpretation_outcome
from hirewise.schemas import StructuredRequirement
from hirewise.services import taxonomy
from hirewise.services.generation import TextGenerator, strip_code_fences

logger = logging.getLogger(__name__)

# Longer descriptions are cut before prompting
MAX_PROMPT_CHARS = 6000

REQUIREMENT_PROMPT = """You are an expert HR recruiter. Parse this hiring requirement and extract structured matching criteria.

"{text}"

Extract and return ONLY a JSON object with this exact structure:
{{
  "role": "Job title/position, or null",
  "location": "Required city/region, or null",
  "skills": ["Required technical and soft skills"],
  "experience": {{"min": minimum years (number or null), "max": maximum years (number or null)}},
  "certifications": ["Required certifications"]
}}

Rules:
- "5+ years" means min: 5; "2-5 years" means min: 2, max: 5
- "Lodhwal, Ludhiana" means location: "Ludhiana"
- Use null or [] for anything not stated. Do not make assumptions.

Return ONLY the JSON object, no additional text."""


class RequirementInterpreter(Protocol):
    async def parse(self, text: str) -> StructuredRequirement:
        ...


def text_only(text: Optional[str]) -> StructuredRequirement:
    """The degraded result: verbatim text, no structured constraints."""
    return StructuredRequirement(raw_text=text or "")


def _as_years(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        years = float(value)
    else:
        match = re.search(r"\d+(?:\.\d+)?", str(value))
        if not match:
            return None
        years = float(match.group())
    return years if years >= 0 else None


def _as_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = taxonomy.normalize_text(value)
    if text in ("", "null", "none", "not specified", "n/a"):
        return None
    return text


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()]


def build_requirement(raw_text: str, data: dict) -> StructuredRequirement:
    """
    Normalize a loosely-shaped dict into a StructuredRequirement.

    Each field is handled on its own, so one malformed field does not
    discard the others.
    """
    experience = data.get("experience")
    if not isinstance(experience, dict):
        experience = {}

    min_years = _as_years(experience.get("min", data.get("min_experience_years")))
    if min_years is None:
        min_years = _as_years(experience.get("exact"))
    max_years = _as_years(experience.get("max", data.get("max_experience_years")))
    if min_years is not None and max_years is not None and max_years < min_years:
        max_years = None

    skills = taxonomy.normalize_skills(_as_list(data.get("skills", data.get("required_skills"))))
    certifications = [
        taxonomy.normalize_text(c) for c in _as_list(data.get("certifications"))
    ]
    location = _as_text(data.get("location"))

    return StructuredRequirement(
        raw_text=raw_text,
        required_skills=skills or None,
        role=_as_text(data.get("role")),
        location=taxonomy.normalize_location(location) if location else None,
        min_experience_years=min_years,
        max_experience_years=max_years,
        certifications=certifications or None,
    )


class LLMRequirementInterpreter:
    """
    Requirement interpreter backed by a TextGenerator.

    Attributes:
        generator: Text generation provider
    """

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def parse(self, text: str) -> StructuredRequirement:
        raw_text = text or ""
        if not raw_text.strip():
            return text_only(raw_text)

        prompt = REQUIREMENT_PROMPT.format(text=raw_text[:MAX_PROMPT_CHARS])
        try:
            content = await self.generator.generate(prompt)
        except GenerationUnavailable:
            logger.info("Requirement interpretation unavailable, using text-only matching")
            record_interpretation_outcome("text_only")
            return text_only(raw_text)
        except Exception as e:
            logger.error(f"Requirement interpretation failed: {e}")
            record_interpretation_outcome("text_only")
            return text_only(raw_text)

        requirement = self._parse_response(raw_text, content)
        record_interpretation_outcome("text_only" if requirement.is_text_only else "structured")
        return requirement

    def _parse_response(self, raw_text: str, content: Optional[str]) -> StructuredRequirement:
        if not content:
            return text_only(raw_text)

        try:
            data = json.loads(strip_code_fences(content))
        except json.JSONDecodeError:
            logger.warning(f"Failed to parse requirement response as JSON: {content[:100]}")
            return text_only(raw_text)

        if not isinstance(data, dict):
            logger.warning("Requirement response was not a JSON object")
            return text_only(raw_text)

        return build_requirement(raw_text, data)


class KeywordRequirementInterpreter:
    """
    Rule-based interpreter that needs no collaborator.

    Recognizes vocabulary from the hiring taxonomy: skills (with
    synonyms), known locations, role titles and experience phrases such
    as "3+ yrs", "2-5 years" and "minimum 3 years".
    """

    EXPERIENCE_RANGE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:-|to)\s*(\d+(?:\.\d+)?)\s*(?:years?|yrs?)")
    EXPERIENCE_MIN = re.compile(r"(\d+(?:\.\d+)?)\s*\+?\s*(?:years?|yrs?)")

    async def parse(self, text: str) -> StructuredRequirement:
        raw_text = text or ""
        if not raw_text.strip():
            return text_only(raw_text)

        try:
            requirement = self.extract(raw_text)
        except Exception as e:
            logger.error(f"Keyword requirement extraction failed: {e}")
            requirement = text_only(raw_text)

        record_interpretation_outcome("text_only" if requirement.is_text_only else "structured")
        return requirement

    def extract(self, raw_text: str) -> StructuredRequirement:
        lowered = raw_text.lower()
        data: dict[str, Any] = {
            "role": taxonomy.extract_role(raw_text),
            "location": taxonomy.extract_location(raw_text),
            "skills": taxonomy.extract_skills(raw_text),
            "certifications": taxonomy.extract_certifications(raw_text),
        }

        range_match = self.EXPERIENCE_RANGE.search(lowered)
        if range_match:
            data["experience"] = {"min": range_match.group(1), "max": range_match.group(2)}
        else:
            min_match = self.EXPERIENCE_MIN.search(lowered)
            if min_match:
                data["experience"] = {"min": min_match.group(1)}

        return build_requirement(raw_text, data)


def get_requirement_interpreter(provider_name: str, generator: TextGenerator) -> RequirementInterpreter:
    provider_name = (provider_name or "llm").lower()
    if provider_name == "llm":
        return LLMRequirementInterpreter(generator)
    elif provider_name == "keyword":
        return KeywordRequirementInterpreter()
    raise ValueError(
        f"Unknown interpreter provider: {provider_name}. Supported: llm, keyword"
    )
