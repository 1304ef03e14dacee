"""
Parsing Job Tracker - resume intake state machine

Owns creation, status transitions and status reads for parsing jobs.
The request that submits a resume gets a handle back immediately; the
extraction itself runs either inline (synchronous strategies) or in the
Celery worker, and callers poll get_status() until a terminal state.

State Machine:
    queued → processing → {completed, failed}
    queued → failed

Duplicate submissions:
    A candidate has at most one active (queued/processing) job. submit()
    while one is active returns the existing job instead of creating a
    second one. The unique active_candidate_id column settles concurrent
    submits: the loser of the insert race re-reads and reuses the
    winner's job (or creates its own if the winner already finished).

Completion:
    advance(..., COMPLETED, fields) writes the candidate fields and flips
    the status in one transaction. If that write fails the job stays in
    processing and the worker may retry. Inline strategies have no retry,
    so a storage failure there marks the job failed before re-raising.

Failed jobs are never re-queued here; a new submit() is the retry.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from hirewise.exceptions import (
    ConflictError,
    ExtractionError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from hirewise.middleware.metrics import record_job_transition
from hirewise.models import ALLOWED_TRANSITIONS, CANDIDATE_WRITABLE_FIELDS, JobStatus
from hirewise.schemas import JobHandle, ParsingJobResponse
from hirewise.services.extraction import ExtractionStrategy
from hirewise.stores import JobStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ParsingJobTracker:
    """
    Resume intake job tracker.

    Attributes:
        store: JobStore for durable job records
        strategy: ExtractionStrategy deciding how extraction runs
    """

    def __init__(self, store: JobStore, strategy: ExtractionStrategy):
        self.store = store
        self.strategy = strategy

    async def submit(
        self,
        candidate_id: str,
        file_path: str,
        application_id: Optional[str] = None,
    ) -> JobHandle:
        """
        Start intake of a resume for a candidate.

        Args:
            candidate_id: Owning candidate (required)
            file_path: Source document reference (required)
            application_id: Optional job application correlation id

        Returns:
            JobHandle with the job id and its current status. ``reused``
            is True when an already-active job was returned.

        Raises:
            ValidationError: candidate_id or file_path is empty
            StorageError: Database failure
        """
        candidate_id = (candidate_id or "").strip()
        file_path = (file_path or "").strip()
        if not candidate_id or not file_path:
            raise ValidationError("Missing file_path or candidate_id")
        application_id = (application_id or "").strip() or None

        for attempt in range(2):
            active = await self.store.get_active_job(candidate_id)
            if active is not None:
                logger.info(f"Reusing active parsing job {active.id} for candidate {candidate_id}")
                return JobHandle(id=active.id, status=active.status, reused=True)

            try:
                job = await self.store.create_job(
                    candidate_id=candidate_id,
                    file_path=file_path,
                    parsing_method=self.strategy.method,
                    started_at=utcnow(),
                    application_id=application_id,
                )
                break
            except ConflictError:
                # Lost the insert race to a concurrent submit; its job may
                # already be terminal by the time we look again
                if attempt:
                    raise
                logger.info(f"Concurrent submit for candidate {candidate_id}, re-checking active job")

        record_job_transition(JobStatus.QUEUED.value)
        logger.info(f"Created parsing job {job.id} for candidate {candidate_id} ({self.strategy.method})")

        if self.strategy.synchronous:
            status = await self._run_inline(job.id, file_path)
        else:
            status = await self._dispatch(job.id, file_path)
            if status is JobStatus.FAILED:
                await self.advance(job.id, JobStatus.FAILED, error_message="Failed to enqueue extraction")

        return JobHandle(id=job.id, status=status.value)

    async def get_status(self, job_id: str) -> ParsingJobResponse:
        """
        Read a job. Side-effect free, safe to poll.

        Raises:
            NotFoundError: job_id does not resolve
            StorageError: Database failure
        """
        job = await self.store.get_job(job_id)
        if job is None:
            raise NotFoundError("Parsing job not found", details={"parsing_job_id": job_id})
        return ParsingJobResponse.model_validate(job)

    async def advance(
        self,
        job_id: str,
        new_status: JobStatus | str,
        extracted_fields: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> ParsingJobResponse:
        """
        Move a job forward. Called by the extraction worker.

        Args:
            job_id: Job to move
            new_status: Target status
            extracted_fields: Candidate columns to write; only accepted
                together with ``completed``
            error_message: Failure reason, stored with ``failed``

        Raises:
            ValidationError: Unknown status, or fields that are not
                writable candidate columns
            NotFoundError: Job (or, with fields, candidate) not found
            InvalidTransitionError: Not a forward transition from the
                current status
            StorageError: Database failure; the job keeps its old status
        """
        try:
            target = JobStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown parsing job status: {new_status}")

        if extracted_fields and target is not JobStatus.COMPLETED:
            raise ValidationError("Extracted fields can only be applied when completing a job")
        fields = self._validate_fields(extracted_fields or {})

        job = await self.store.get_job(job_id)
        if job is None:
            raise NotFoundError("Parsing job not found", details={"parsing_job_id": job_id})

        current = JobStatus(job.status)
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransitionError(job_id, current.value, target.value)

        if target is JobStatus.COMPLETED:
            updated = await self.store.complete_job(
                job_id, current, job.candidate_id, fields, completed_at=utcnow()
            )
        else:
            updated = await self.store.transition(
                job_id,
                current,
                target,
                completed_at=utcnow() if target.is_terminal else None,
                error_message=error_message,
            )

        if updated is None:
            # Status changed between our read and the compare-and-set
            latest = await self.store.get_job(job_id)
            raise InvalidTransitionError(job_id, latest.status if latest else current.value, target.value)

        record_job_transition(target.value)
        logger.info(f"Parsing job {job_id}: {current.value} -> {target.value}")
        return ParsingJobResponse.model_validate(updated)

    async def mark_failed(self, job_id: str, error_message: str) -> bool:
        """
        Best-effort move of a non-terminal job to failed.

        Releases the candidate's active-job slot after a failure nothing
        will retry. Errors are logged, not raised.

        Returns:
            True if the job is now failed
        """
        try:
            await self.advance(job_id, JobStatus.FAILED, error_message=error_message)
        except (InvalidTransitionError, NotFoundError, StorageError) as e:
            logger.error(f"Could not mark parsing job {job_id} failed: {e.message}")
            return False
        return True

    async def _run_inline(self, job_id: str, file_path: str) -> JobStatus:
        try:
            return await self._extract_inline(job_id, file_path)
        except StorageError as e:
            # Inline jobs have no worker retry; a job left active would be reused forever
            logger.error(f"Storage failure on inline parsing job {job_id}: {e.message}")
            await self.mark_failed(job_id, f"Storage failure during extraction: {e.message}")
            raise

    async def _extract_inline(self, job_id: str, file_path: str) -> JobStatus:
        await self.advance(job_id, JobStatus.PROCESSING)
        try:
            fields = await self.strategy.run(job_id, file_path)
        except ExtractionError as e:
            logger.warning(f"Inline extraction failed for job {job_id}: {e.message}")
            await self.advance(job_id, JobStatus.FAILED, error_message=e.message)
            return JobStatus.FAILED

        try:
            await self.advance(job_id, JobStatus.COMPLETED, extracted_fields=fields)
        except NotFoundError as e:
            await self.advance(job_id, JobStatus.FAILED, error_message=e.message)
            return JobStatus.FAILED
        return JobStatus.COMPLETED

    async def _dispatch(self, job_id: str, file_path: str) -> JobStatus:
        try:
            await self.strategy.run(job_id, file_path)
        except Exception as e:
            logger.error(f"Failed to dispatch parsing job {job_id}: {e}")
            return JobStatus.FAILED
        return JobStatus.QUEUED

    @staticmethod
    def _validate_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
        unknown = sorted(set(fields) - CANDIDATE_WRITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown candidate fields: {', '.join(unknown)}",
                details={"fields": unknown},
            )
        return dict(fields)
