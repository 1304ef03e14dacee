from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class StructuredRequirement(BaseModel):
    """
    Normalized hiring criteria derived from free text.

    ``raw_text`` is always the verbatim input. Every other field is
    independently optional and ``None`` means "no constraint".
    """

    raw_text: str
    required_skills: Optional[list[str]] = None
    role: Optional[str] = None
    location: Optional[str] = None
    min_experience_years: Optional[float] = None
    max_experience_years: Optional[float] = None
    certifications: Optional[list[str]] = None

    @property
    def is_text_only(self) -> bool:
        return not self.constraints()

    def constraints(self) -> dict:
        """Structured fields that are set, without the raw text."""
        return self.model_dump(exclude={"raw_text"}, exclude_none=True)


class MatchRationale(BaseModel):
    candidate_id: str
    summary_text: str


class SearchSummaryRequest(BaseModel):
    candidate_id: str = Field("", alias="candidateId")
    type: str = "smart"
    query: Optional[str] = None
    jd: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class SearchSummaryResponse(BaseModel):
    candidate_id: str = Field(..., alias="candidateId")
    summary: str

    model_config = ConfigDict(populate_by_name=True)
