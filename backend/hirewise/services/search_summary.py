"""
Search Summary Orchestrator - "why this candidate?" use case

Steps, each with its own failure boundary:
    1. authenticate          -> Unauthorized (nothing else is touched)
    2. candidate lookup      -> ValidationError / NotFoundError / StorageError
    3. pick the text source  (jd body for type "jd", otherwise query)
    4. interpret, then explain (neither raises outward)
    5. MatchRationale(candidate_id, summary_text)
"""

import logging
from typing import Optional

from hirewise.auth import Credentials, SessionAuthenticator
from hirewise.exceptions import NotFoundError, ValidationError
from hirewise.schemas import MatchRationale
from hirewise.services.match_explainer import MatchExplainer
from hirewise.services.requirement_interpreter import RequirementInterpreter
from hirewise.stores import CandidateStore

logger = logging.getLogger(__name__)


def select_requirement_text(query_kind: Optional[str], query: Optional[str], jd: Optional[str]) -> str:
    if (query_kind or "").lower() == "jd":
        return jd or ""
    return query or ""


class SearchSummaryOrchestrator:
    def __init__(
        self,
        authenticator: SessionAuthenticator,
        candidate_store: CandidateStore,
        interpreter: RequirementInterpreter,
        explainer: MatchExplainer,
    ):
        self.authenticator = authenticator
        self.candidate_store = candidate_store
        self.interpreter = interpreter
        self.explainer = explainer

    async def run(
        self,
        credentials: Credentials,
        candidate_id: Optional[str],
        query_kind: Optional[str] = "smart",
        query: Optional[str] = None,
        jd: Optional[str] = None,
    ) -> MatchRationale:
        """
        Raises:
            Unauthorized: No valid session cookie or bearer token
            ValidationError: candidate_id missing
            NotFoundError: Candidate does not exist
            StorageError: Candidate lookup failed
        """
        self.authenticator.authenticate(credentials)

        candidate_id = (candidate_id or "").strip()
        if not candidate_id:
            raise ValidationError("Missing candidateId")

        candidate = await self.candidate_store.get_candidate(candidate_id)
        if candidate is None:
            raise NotFoundError("Candidate not found", details={"candidate_id": candidate_id})

        text = select_requirement_text(query_kind, query, jd)
        requirement = await self.interpreter.parse(text)
        summary = await self.explainer.explain(candidate, requirement)

        logger.info(f"Generated match summary for candidate {candidate_id} ({len(text)} chars of requirement)")
        return MatchRationale(candidate_id=candidate_id, summary_text=summary)
