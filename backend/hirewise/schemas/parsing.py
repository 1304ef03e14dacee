from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class ParseSubmitRequest(BaseModel):
    file_path: str
    candidate_id: str
    application_id: Optional[str] = None


class ParseSubmitResponse(BaseModel):
    parsing_job_id: str
    status: str


class JobHandle(BaseModel):
    """What submit hands back: the job id and its status at return time."""

    id: str
    status: str
    reused: bool = False


class ParsingJobResponse(BaseModel):
    id: str
    candidate_id: str
    application_id: Optional[str] = None
    file_path: str
    status: str
    parsing_method: str
    error_message: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_terminal(self) -> bool:
        return self.status in ("completed", "failed")


class ParsingJobEnvelope(BaseModel):
    parsing_job: ParsingJobResponse
