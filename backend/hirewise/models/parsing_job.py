"""
ParsingJob Model - one resume intake attempt

A parsing job tracks extraction of structured fields from a candidate's
source document. Rows are never deleted; they form the intake audit trail.

Status Flow:
    queued → processing → completed
       │          └──────→ failed
       └─────────────────→ failed

``active_candidate_id`` holds the candidate id while the job is queued or
processing and is cleared when it reaches a terminal state. Its unique
constraint is what keeps at most one active job per candidate.
"""

import uuid
from enum import Enum

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from hirewise.database import Base


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


ACTIVE_STATUSES = frozenset({JobStatus.QUEUED, JobStatus.PROCESSING})
TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})

ALLOWED_TRANSITIONS = {
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class ParsingJob(Base):
    """
    Resume intake job.

    Attributes:
        id: UUID primary key
        candidate_id: Owning candidate (indexed)
        application_id: Optional job application correlation id
        file_path: Source document reference as submitted
        status: queued | processing | completed | failed
        parsing_method: Tag of the extraction strategy (e.g. "edge_stub")
        active_candidate_id: candidate_id while active, NULL once terminal (unique)
        error_message: Failure reason for failed jobs
        started_at: Intake start (set on creation)
        completed_at: Set only when the job reaches a terminal state
    """

    __tablename__ = "parsing_jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    candidate_id = Column(String, nullable=False, index=True)
    application_id = Column(String, nullable=True)
    file_path = Column(String(2000), nullable=False)
    status = Column(String(20), nullable=False, default=JobStatus.QUEUED.value, index=True)
    parsing_method = Column(String(50), nullable=False)
    active_candidate_id = Column(String, nullable=True, unique=True)
    error_message = Column(Text, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
