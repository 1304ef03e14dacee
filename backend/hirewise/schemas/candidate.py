from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


class CandidateProfile(BaseModel):
    """Read model of a candidate, decoupled from the ORM row."""

    id: str
    name: Optional[str] = None
    current_role: Optional[str] = None
    current_company: Optional[str] = None
    location: Optional[str] = None
    total_experience: Optional[str] = None
    technical_skills: list[str] = Field(default_factory=list)
    file_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("technical_skills", mode="before")
    @classmethod
    def _skills_default(cls, value):
        if value is None:
            return []
        return [str(skill) for skill in value if str(skill).strip()]
