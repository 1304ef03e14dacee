"""
Resume Field Extraction - strategies and extractors

Two layers:

ResumeFieldExtractor (what)
    ``async extract(file_path) -> dict`` of candidate columns.
    - NullFieldExtractor: extracts nothing (the sample "edge_stub" strategy)
    - LLMFieldExtractor: prompts a TextGenerator over already-decoded text

ExtractionStrategy (when)
    - InlineExtractionStrategy: runs the extractor inside submit(), so the
      job is terminal by the time the caller gets a handle
    - CeleryExtractionStrategy: leaves the job queued and hands it to the
      Celery worker (hirewise.tasks.parsing.process_parsing_job)

Binary document decoding is handled upstream; LocalTextLoader only reads
plain text that has already been stored under the resume directory.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

from hirewise.exceptions import ExtractionError
from hirewise.services.generation import TextGenerator, strip_code_fences

logger = logging.getLogger(__name__)

# Resume text beyond this is not sent to the generator
MAX_RESUME_CHARS = 5000

FIELD_EXTRACTION_PROMPT = """You are an expert resume parser. Extract accurate information from this resume and return ONLY a valid JSON object.

CRITICAL INSTRUCTIONS:
1. Return ONLY valid JSON - no explanations, no markdown, no extra text
2. If a field is not found, use empty string "" for text or empty array [] for lists
3. For experience, calculate total years from all work experience and use format like "5 years"
4. For skills, extract ONLY skills actually mentioned in the resume
5. For current role and company, use the most recent position

{{
  "name": "Full name",
  "email": "Email address",
  "phone": "Phone number",
  "currentRole": "Current job title",
  "currentCompany": "Current employer",
  "location": "Current location (city, state, country)",
  "totalExperience": "Total years of experience",
  "technicalSkills": ["technical skills mentioned in resume"],
  "summary": "Professional summary if present"
}}

RESUME TEXT:
{text}

Return ONLY the JSON object:"""

# LLM response key -> candidate column
FIELD_MAP: Dict[str, str] = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "currentRole": "current_role",
    "currentCompany": "current_company",
    "location": "location",
    "totalExperience": "total_experience",
    "technicalSkills": "technical_skills",
    "summary": "summary",
}

PLACEHOLDER_VALUES = {"", "not specified", "unknown", "n/a", "none", "null"}


class ResumeFieldExtractor(Protocol):
    async def extract(self, file_path: str) -> Dict[str, Any]:
        ...


class NullFieldExtractor:
    """Extracts no fields."""

    async def extract(self, file_path: str) -> Dict[str, Any]:
        return {}


class LocalTextLoader:
    """Reads plain-text resumes stored under ``base_dir``."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir).resolve()

    def __call__(self, file_path: str) -> str:
        path = (self.base_dir / file_path).resolve()
        if self.base_dir not in path.parents:
            raise ExtractionError(f"Resume path escapes storage directory: {file_path}")
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ExtractionError(f"Could not read resume {file_path}: {e}") from e


def _clean_string(value: Any) -> Optional[str]:
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return None
    text = " ".join(str(value).split())
    return None if text.lower() in PLACEHOLDER_VALUES else text


def _clean_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    cleaned = []
    for item in value:
        text = _clean_string(item)
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


class LLMFieldExtractor:
    """
    Resume field extraction via a TextGenerator.

    Attributes:
        generator: Text generation provider
        load_text: Callable returning the resume text for a file path
    """

    def __init__(self, generator: TextGenerator, load_text: Callable[[str], str]):
        self.generator = generator
        self.load_text = load_text

    async def extract(self, file_path: str) -> Dict[str, Any]:
        """
        Raises:
            ExtractionError: Text could not be loaded, generation failed
                or the response held no usable fields
        """
        text = self.load_text(file_path)
        if not text.strip():
            raise ExtractionError(f"No text could be read from {file_path}")

        prompt = FIELD_EXTRACTION_PROMPT.format(text=text[:MAX_RESUME_CHARS])
        try:
            content = await self.generator.generate(prompt)
        except Exception as e:
            raise ExtractionError(f"Field extraction failed: {e}") from e

        fields = self._parse_response(content)
        if not fields:
            raise ExtractionError("Field extraction returned no usable fields")
        return fields

    def _parse_response(self, content: str) -> Dict[str, Any]:
        try:
            data = json.loads(strip_code_fences(content or ""))
        except json.JSONDecodeError:
            logger.warning(f"Failed to parse extraction response as JSON: {(content or '')[:100]}")
            return {}
        if not isinstance(data, dict):
            return {}

        fields: Dict[str, Any] = {}
        for key, column in FIELD_MAP.items():
            if column == "technical_skills":
                skills = _clean_list(data.get(key))
                if skills:
                    fields[column] = skills
            else:
                value = _clean_string(data.get(key))
                if value:
                    fields[column] = value
        return fields


# ==================== Strategies ====================

class ExtractionStrategy(ABC):
    """
    When extraction runs relative to submit().

    Attributes:
        method: Tag stored on the job as parsing_method
        synchronous: True if submit() drives the job to a terminal state
    """

    method: str
    synchronous: bool

    @abstractmethod
    async def run(self, job_id: str, file_path: str) -> Optional[Dict[str, Any]]:
        """
        Start extraction for a job.

        Synchronous strategies return the extracted candidate fields.
        Queued strategies hand the job to a worker and return None.
        """
        pass


class InlineExtractionStrategy(ExtractionStrategy):
    synchronous = True

    def __init__(self, extractor: ResumeFieldExtractor, method: str = "inline"):
        self.extractor = extractor
        self.method = method

    async def run(self, job_id: str, file_path: str) -> Dict[str, Any]:
        fields = await self.extractor.extract(file_path)
        if fields:
            fields.setdefault("file_url", file_path)
        return fields


class CeleryExtractionStrategy(ExtractionStrategy):
    synchronous = False

    def __init__(self, dispatcher: Optional[Callable[[str, str], Any]] = None, method: str = "celery_worker"):
        self._dispatcher = dispatcher
        self.method = method

    async def run(self, job_id: str, file_path: str) -> None:
        if self._dispatcher is None:
            # Import here to avoid circular import
            from hirewise.tasks.parsing import process_parsing_job
            self._dispatcher = process_parsing_job.delay
        self._dispatcher(job_id, file_path)


def get_field_extractor(provider_name: str, generator: TextGenerator, resume_dir: str) -> ResumeFieldExtractor:
    provider_name = (provider_name or "none").lower()
    if provider_name == "llm":
        return LLMFieldExtractor(generator, LocalTextLoader(resume_dir))
    elif provider_name == "none":
        return NullFieldExtractor()
    raise ValueError(f"Unknown field extractor: {provider_name}. Supported: llm, none")


def get_extraction_strategy(strategy_name: str, extractor: ResumeFieldExtractor) -> ExtractionStrategy:
    strategy_name = (strategy_name or "stub").lower()
    if strategy_name == "stub":
        return InlineExtractionStrategy(NullFieldExtractor(), method="edge_stub")
    elif strategy_name == "inline":
        return InlineExtractionStrategy(extractor, method="inline")
    elif strategy_name == "async":
        return CeleryExtractionStrategy()
    raise ValueError(f"Unknown extraction strategy: {strategy_name}. Supported: stub, inline, async")
