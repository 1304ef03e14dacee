"""
Match Explainer - grounded "why this candidate?" rationale

Produces a short natural-language explanation for one candidate against
one StructuredRequirement.

Grounding:
    assess_match() compares the profile with each structured constraint
    (role, location, skills, experience floor) and lists the matches and
    gaps it can prove. Those facts, the requirement and the candidate
    fields are the only material given to the generator, and the prompt
    tells it to name matches first, then critical gaps.

Degradation:
    explain() always returns a non-empty string. A missing provider
    yields UNAVAILABLE_SUMMARY, any other failure FAILED_SUMMARY.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from hirewise.exceptions import GenerationUnavailable
from hirewise.middleware.metrics import record_summary_outcome
from hirewise.schemas import CandidateProfile, StructuredRequirement
from hirewise.services import taxonomy
from hirewise.services.generation import TextGenerator

logger = logging.getLogger(__name__)

UNAVAILABLE_SUMMARY = "AI summary not available (API Key missing)."
FAILED_SUMMARY = "Summary generation failed."

MAX_SUMMARY_WORDS = 40
# Only the first skills on a profile are significant enough for the prompt
MAX_PROMPT_SKILLS = 10

SUMMARY_PROMPT = """Act as an expert Recruiter.
Provide a "Why this candidate?" insight (max {max_words} words).

Requirements:
{requirements}

Candidate:
Role: {role}
Company: {company}
Exp: {experience}
Loc: {location}
Skills: {skills}

Observed matches:
{matches}

Observed gaps:
{gaps}

Task:
- Explain the match logic clearly.
- Highlight KEY matches (Role, Location, Skills) first.
- Then mention CRITICAL gaps if any (e.g. location mismatch, missing required skill).
- Use only the facts listed above. Do not invent experience, skills or locations.
- Style: Professional, Insightful, Direct.
- Example: "Strong match for Fleet Manager role in Hyderabad. Has required GPS tracking skills and relevant experience. Good fit."
- Example: "Role matches but location mismatch (Mumbai vs Delhi). Good backup candidate if location is flexible."
"""


@dataclass
class MatchAssessment:
    """Facts about a candidate/requirement pair that the profile can prove."""

    matches: List[str] = field(default_factory=list)
    gaps: List[str] = field(default_factory=list)


def parse_years(value: Optional[str]) -> Optional[float]:
    """Read "5 years", "3.5 yrs" or "7" as a number of years."""
    if not value:
        return None
    match = re.search(r"\d+(?:\.\d+)?", str(value))
    return float(match.group()) if match else None


def _format_years(years: float) -> str:
    return f"{years:g}"


def _display(value: str) -> str:
    return value.title() if value.islower() else value


def role_matches(candidate_role: str, required_role: str) -> bool:
    """
    Containment either way, or the same head noun with at least half
    of the required title's words present.
    """
    have = taxonomy.normalize_text(candidate_role)
    want = taxonomy.normalize_text(required_role)
    if not have or not want:
        return False
    if want in have or have in want:
        return True

    have_words = set(re.findall(r"[a-z0-9+#]+", have))
    want_words = re.findall(r"[a-z0-9+#]+", want)
    if not want_words or want_words[-1].rstrip("s") not in {w.rstrip("s") for w in have_words}:
        return False
    overlap = sum(1 for w in want_words if w in have_words)
    return overlap * 2 >= len(want_words)


def location_matches(candidate_location: str, required_location: str) -> bool:
    have = taxonomy.normalize_text(candidate_location)
    want = taxonomy.normalize_location(required_location)
    if want == "remote":
        return True
    parts = {taxonomy.normalize_location(p) for p in re.split(r"[,/]", have) if p.strip()}
    return want in parts or want in have or any(p and p in want for p in parts)


def assess_match(candidate: CandidateProfile, requirement: StructuredRequirement) -> MatchAssessment:
    """Compare the profile with every structured constraint that is set."""
    assessment = MatchAssessment()

    if requirement.role:
        wanted = _display(requirement.role)
        if candidate.current_role and role_matches(candidate.current_role, requirement.role):
            assessment.matches.append(f"Role: {candidate.current_role} matches {wanted}")
        elif candidate.current_role:
            assessment.gaps.append(f"Role mismatch ({candidate.current_role} vs {wanted})")
        else:
            assessment.gaps.append(f"Current role not stated (required: {wanted})")

    if requirement.location:
        wanted = _display(requirement.location)
        if candidate.location and location_matches(candidate.location, requirement.location):
            assessment.matches.append(f"Location: {candidate.location}")
        elif candidate.location:
            assessment.gaps.append(f"Location mismatch ({candidate.location} vs {wanted})")
        else:
            assessment.gaps.append(f"Location not stated (required: {wanted})")

    if requirement.required_skills:
        have = set(taxonomy.normalize_skills(candidate.technical_skills))
        matched = [s for s in requirement.required_skills if s in have]
        missing = [s for s in requirement.required_skills if s not in have]
        if matched:
            assessment.matches.append(f"Skills: {', '.join(matched)}")
        if missing:
            assessment.gaps.append(f"Missing skills: {', '.join(missing)}")

    if requirement.min_experience_years is not None:
        years = parse_years(candidate.total_experience)
        floor = _format_years(requirement.min_experience_years)
        if years is None:
            assessment.gaps.append(f"Experience not stated (required: {floor}+ years)")
        elif years >= requirement.min_experience_years:
            assessment.matches.append(f"Experience: {_format_years(years)} years meets {floor}+ years")
        else:
            assessment.gaps.append(f"Experience below requirement ({_format_years(years)} vs {floor}+ years)")

    return assessment


class MatchExplainer:
    """
    Builds the grounded prompt and asks the generator for a rationale.

    Attributes:
        generator: Text generation provider
        max_words: Word bound stated in the generation instruction
    """

    def __init__(self, generator: TextGenerator, max_words: int = MAX_SUMMARY_WORDS):
        self.generator = generator
        self.max_words = max_words

    def build_prompt(
        self,
        candidate: CandidateProfile,
        requirement: StructuredRequirement,
        assessment: MatchAssessment,
    ) -> str:
        requirements = requirement.constraints() or {"text": requirement.raw_text}
        return SUMMARY_PROMPT.format(
            max_words=self.max_words,
            requirements=json.dumps(requirements, ensure_ascii=False),
            role=candidate.current_role or "Not specified",
            company=candidate.current_company or "Not specified",
            experience=candidate.total_experience or "Not specified",
            location=candidate.location or "Not specified",
            skills=", ".join(candidate.technical_skills[:MAX_PROMPT_SKILLS]) or "Not specified",
            matches="\n".join(f"- {m}" for m in assessment.matches) or "- None identified",
            gaps="\n".join(f"- {g}" for g in assessment.gaps) or "- None identified",
        )

    async def explain(self, candidate: CandidateProfile, requirement: StructuredRequirement) -> str:
        assessment = assess_match(candidate, requirement)
        prompt = self.build_prompt(candidate, requirement, assessment)

        try:
            text = await self.generator.generate(prompt)
        except GenerationUnavailable:
            record_summary_outcome("unavailable")
            return UNAVAILABLE_SUMMARY
        except Exception as e:
            logger.error(f"Error generating candidate summary for {candidate.id}: {e}")
            record_summary_outcome("failed")
            return FAILED_SUMMARY

        summary = (text or "").strip().strip('"').strip()
        if not summary:
            logger.warning(f"Empty summary generated for candidate {candidate.id}")
            record_summary_outcome("failed")
            return FAILED_SUMMARY

        record_summary_outcome("generated")
        return summary
