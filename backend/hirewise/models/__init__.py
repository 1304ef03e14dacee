from hirewise.models.candidate import Candidate, CANDIDATE_WRITABLE_FIELDS
from hirewise.models.parsing_job import (
    ParsingJob,
    JobStatus,
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    ALLOWED_TRANSITIONS,
)

__all__ = [
    "Candidate",
    "CANDIDATE_WRITABLE_FIELDS",
    "ParsingJob",
    "JobStatus",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "ALLOWED_TRANSITIONS",
]
