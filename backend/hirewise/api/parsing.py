"""
Resume Intake API

Endpoints:
    POST /resume-parse - Submit a resume for field extraction
    GET /resume-parse-status - Poll a parsing job

Both are called by the upload pipeline, not by end users, so they are
not behind the session check.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hirewise.api.dependencies import get_tracker
from hirewise.exceptions import ValidationError
from hirewise.schemas import ParseSubmitRequest, ParseSubmitResponse, ParsingJobEnvelope
from hirewise.services.parsing_tracker import ParsingJobTracker

logger = logging.getLogger(__name__)
router = APIRouter(tags=["parsing"])


@router.post("/resume-parse", response_model=ParseSubmitResponse)
async def submit_resume(
    request: ParseSubmitRequest,
    tracker: ParsingJobTracker = Depends(get_tracker),
):
    handle = await tracker.submit(
        candidate_id=request.candidate_id,
        file_path=request.file_path,
        application_id=request.application_id,
    )
    return ParseSubmitResponse(parsing_job_id=handle.id, status=handle.status)


@router.get("/resume-parse-status", response_model=ParsingJobEnvelope)
async def get_parse_status(
    parsing_job_id: Optional[str] = Query(None),
    tracker: ParsingJobTracker = Depends(get_tracker),
):
    if not parsing_job_id or not parsing_job_id.strip():
        raise ValidationError("Missing parsing_job_id")

    job = await tracker.get_status(parsing_job_id.strip())
    return ParsingJobEnvelope(parsing_job=job)
