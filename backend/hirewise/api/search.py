"""
Search Summary API

Endpoints:
    POST /api/search/summary - "Why this candidate?" for one candidate
                               against a query or job description

Authentication: session_token cookie or Authorization: Bearer header.
"""

import logging

from fastapi import APIRouter, Depends, Request

from hirewise.api.dependencies import get_search_summary
from hirewise.auth import credentials_from_request
from hirewise.schemas import SearchSummaryRequest, SearchSummaryResponse
from hirewise.services.search_summary import SearchSummaryOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/search", tags=["search"])


@router.post("/summary", response_model=SearchSummaryResponse, response_model_by_alias=True)
async def search_summary(
    body: SearchSummaryRequest,
    request: Request,
    orchestrator: SearchSummaryOrchestrator = Depends(get_search_summary),
):
    rationale = await orchestrator.run(
        credentials_from_request(request),
        body.candidate_id,
        query_kind=body.type,
        query=body.query,
        jd=body.jd,
    )
    return SearchSummaryResponse(candidate_id=rationale.candidate_id, summary=rationale.summary_text)
