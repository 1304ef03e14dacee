"""
Job Store - durable record of parsing jobs

Pure data access: every method is one short transaction against the
``parsing_jobs`` table (and, for completion, the ``candidates`` table).
State-machine rules live in ParsingJobTracker; the store only offers
the compare-and-set primitives the tracker needs.

Error translation:
    - Unique violation on active_candidate_id → ConflictError
    - Any other SQLAlchemyError → StorageError
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hirewise.database import Database
from hirewise.exceptions import ConflictError, NotFoundError, StorageError
from hirewise.models import ACTIVE_STATUSES, Candidate, JobStatus, ParsingJob

logger = logging.getLogger(__name__)


class JobStore:
    def __init__(self, database: Database):
        self.database = database

    async def create_job(
        self,
        *,
        candidate_id: str,
        file_path: str,
        parsing_method: str,
        started_at: datetime,
        application_id: Optional[str] = None,
    ) -> ParsingJob:
        """
        Insert a new job in state ``queued``.

        Raises:
            ConflictError: The candidate already has an active job
            StorageError: Any other database failure
        """
        job = ParsingJob(
            candidate_id=candidate_id,
            application_id=application_id,
            file_path=file_path,
            status=JobStatus.QUEUED.value,
            parsing_method=parsing_method,
            active_candidate_id=candidate_id,
            started_at=started_at,
            created_at=started_at,
        )
        async with self.database.session() as session:
            try:
                session.add(job)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConflictError(
                    f"Candidate {candidate_id} already has an active parsing job",
                    details={"candidate_id": candidate_id},
                ) from e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to create parsing job for {candidate_id}: {e}")
                raise StorageError("Failed to create parsing job") from e
        return job

    async def get_job(self, job_id: str) -> Optional[ParsingJob]:
        try:
            async with self.database.session() as session:
                result = await session.execute(select(ParsingJob).where(ParsingJob.id == job_id))
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read parsing job {job_id}: {e}")
            raise StorageError("Failed to read parsing job") from e

    async def get_active_job(self, candidate_id: str) -> Optional[ParsingJob]:
        query = (
            select(ParsingJob)
            .where(ParsingJob.candidate_id == candidate_id)
            .where(ParsingJob.status.in_([s.value for s in ACTIVE_STATUSES]))
            .order_by(ParsingJob.started_at.desc())
        )
        try:
            async with self.database.session() as session:
                result = await session.execute(query)
                return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to read active job for {candidate_id}: {e}")
            raise StorageError("Failed to read parsing job") from e

    async def transition(
        self,
        job_id: str,
        expected_status: JobStatus,
        new_status: JobStatus,
        *,
        completed_at: Optional[datetime] = None,
        error_message: Optional[str] = None,
    ) -> Optional[ParsingJob]:
        """
        Move a job from ``expected_status`` to ``new_status``.

        Returns the updated job, or None if the stored status was no
        longer ``expected_status`` (another writer got there first).
        """
        async with self.database.session() as session:
            try:
                applied = await self._flip_status(
                    session, job_id, expected_status, new_status, completed_at, error_message
                )
                if not applied:
                    await session.rollback()
                    return None
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to move parsing job {job_id} to {new_status.value}: {e}")
                raise StorageError("Failed to update parsing job") from e
        return await self.get_job(job_id)

    async def complete_job(
        self,
        job_id: str,
        expected_status: JobStatus,
        candidate_id: str,
        fields: dict[str, Any],
        completed_at: datetime,
    ) -> Optional[ParsingJob]:
        """
        Write extracted fields to the candidate, then flip the job to
        ``completed``, in a single transaction.

        Either both writes are committed or neither is, so a poller never
        sees ``completed`` ahead of the candidate data.

        Raises:
            NotFoundError: Fields were given but the candidate row is missing
            StorageError: Database failure (job is left unchanged)
        """
        async with self.database.session() as session:
            try:
                if fields:
                    result = await session.execute(
                        update(Candidate).where(Candidate.id == candidate_id).values(**fields)
                    )
                    if result.rowcount == 0:
                        await session.rollback()
                        raise NotFoundError(
                            f"Candidate {candidate_id} not found",
                            details={"candidate_id": candidate_id},
                        )

                applied = await self._flip_status(
                    session, job_id, expected_status, JobStatus.COMPLETED, completed_at, None
                )
                if not applied:
                    await session.rollback()
                    return None
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to complete parsing job {job_id}: {e}")
                raise StorageError("Failed to complete parsing job") from e
        return await self.get_job(job_id)

    @staticmethod
    async def _flip_status(
        session,
        job_id: str,
        expected_status: JobStatus,
        new_status: JobStatus,
        completed_at: Optional[datetime],
        error_message: Optional[str],
    ) -> bool:
        values: dict[str, Any] = {"status": new_status.value}
        if new_status.is_terminal:
            values["completed_at"] = completed_at
            values["active_candidate_id"] = None
        if error_message is not None:
            values["error_message"] = error_message

        result = await session.execute(
            update(ParsingJob)
            .where(ParsingJob.id == job_id)
            .where(ParsingJob.status == expected_status.value)
            .values(**values)
        )
        return result.rowcount == 1
