import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from hirewise.database import Database
from hirewise.exceptions import StorageError
from hirewise.models import Candidate
from hirewise.schemas import CandidateProfile

logger = logging.getLogger(__name__)


class CandidateStore:
    """Read access to candidate rows for matching."""

    def __init__(self, database: Database):
        self.database = database

    async def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        try:
            async with self.database.session() as session:
                result = await session.execute(select(Candidate).where(Candidate.id == candidate_id))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read candidate {candidate_id}: {e}")
            raise StorageError("Failed to read candidate") from e

        if row is None:
            return None
        return CandidateProfile.model_validate(row)

    async def add_candidate(self, **fields) -> CandidateProfile:
        """Insert a candidate row. Used by seeding scripts and tests."""
        candidate = Candidate(**fields)
        async with self.database.session() as session:
            try:
                session.add(candidate)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError("Failed to create candidate") from e
        return CandidateProfile.model_validate(candidate)
