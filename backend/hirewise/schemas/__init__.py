from hirewise.schemas.candidate import CandidateProfile
from hirewise.schemas.parsing import (
    ParseSubmitRequest,
    ParseSubmitResponse,
    JobHandle,
    ParsingJobResponse,
    ParsingJobEnvelope,
)
from hirewise.schemas.search import (
    StructuredRequirement,
    MatchRationale,
    SearchSummaryRequest,
    SearchSummaryResponse,
)

__all__ = [
    "CandidateProfile",
    "ParseSubmitRequest",
    "ParseSubmitResponse",
    "JobHandle",
    "ParsingJobResponse",
    "ParsingJobEnvelope",
    "StructuredRequirement",
    "MatchRationale",
    "SearchSummaryRequest",
    "SearchSummaryResponse",
]
