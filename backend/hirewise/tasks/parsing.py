"""
Background Tasks for Resume Parsing

The extraction worker side of the parsing job state machine:

    queued ──advance──▶ processing ──extract──▶ completed (fields written)
                                     └────────▶ failed (ExtractionError)

Retries:
    A StorageError while writing the result leaves the job in
    processing, and the task is retried (max 3). On retry the job is
    picked up from processing without another queued → processing move.
    Once retries are exhausted the job is marked failed so the candidate
    can submit again. Jobs that are already terminal are skipped.
"""

import asyncio
import logging
import time

from prometheus_client import Counter, Histogram

from hirewise.celery import celery_app
from hirewise.config import get_settings
from hirewise.exceptions import ExtractionError, NotFoundError, StorageError
from hirewise.models import JobStatus
from hirewise.services.extraction import ResumeFieldExtractor
from hirewise.services.parsing_tracker import ParsingJobTracker

logger = logging.getLogger(__name__)

# ==================== Prometheus Metrics ====================

TASK_DURATION = Histogram(
    "celery_task_duration_seconds",
    "Time spent executing Celery tasks",
    ["task_name"]
)

TASK_FAILURES = Counter(
    "celery_task_failures_total",
    "Number of Celery task failures",
    ["task_name"]
)


# ==================== Worker Body ====================

async def execute_parsing_job(
    tracker: ParsingJobTracker,
    extractor: ResumeFieldExtractor,
    job_id: str,
    file_path: str,
) -> str:
    """
    Drive one job to a terminal state.

    Returns:
        The job status after this run

    Raises:
        NotFoundError: job_id does not resolve
        StorageError: Database failure (job stays non-terminal)
    """
    job = await tracker.get_status(job_id)
    if job.is_terminal:
        logger.info(f"Parsing job {job_id} already {job.status}, skipping")
        return job.status

    if job.status == JobStatus.QUEUED.value:
        await tracker.advance(job_id, JobStatus.PROCESSING)

    try:
        fields = await extractor.extract(file_path)
    except ExtractionError as e:
        logger.warning(f"Extraction failed for parsing job {job_id}: {e.message}")
        await tracker.advance(job_id, JobStatus.FAILED, error_message=e.message)
        return JobStatus.FAILED.value

    if fields:
        fields.setdefault("file_url", file_path)

    try:
        await tracker.advance(job_id, JobStatus.COMPLETED, extracted_fields=fields)
    except NotFoundError as e:
        # Candidate row disappeared; nothing to write the fields to
        await tracker.advance(job_id, JobStatus.FAILED, error_message=e.message)
        return JobStatus.FAILED.value

    logger.info(f"Parsing job {job_id} completed with {len(fields)} fields")
    return JobStatus.COMPLETED.value


async def _process(job_id: str, file_path: str) -> str:
    # Import here to avoid circular import
    from hirewise.container import build_container

    container = build_container(get_settings(), worker=True)
    try:
        return await execute_parsing_job(container.tracker, container.field_extractor, job_id, file_path)
    finally:
        await container.database.dispose()


async def fail_parsing_job(job_id: str, error_message: str) -> bool:
    """Mark a job failed once its retries are exhausted."""
    from hirewise.container import build_container

    container = build_container(get_settings(), worker=True)
    try:
        return await container.tracker.mark_failed(job_id, error_message)
    finally:
        await container.database.dispose()


def run_async(coro):
    """Run a coroutine to completion on a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ==================== Celery Tasks ====================

@celery_app.task(bind=True, max_retries=3, default_retry_delay=30)
def process_parsing_job(self, job_id: str, file_path: str) -> dict:
    """
    Extract candidate fields for a queued parsing job.

    Args:
        job_id: Parsing job id
        file_path: Source document reference as submitted

    Returns:
        Dict with the job id and its final status
    """
    start_time = time.time()

    try:
        status = run_async(_process(job_id, file_path))
        return {"parsing_job_id": job_id, "status": status}

    except StorageError as exc:
        TASK_FAILURES.labels(task_name="process_parsing_job").inc()
        logger.error(f"Storage failure on parsing job {job_id}: {exc.message}")
        if self.request.retries >= self.max_retries:
            run_async(fail_parsing_job(job_id, f"Storage failure after {self.max_retries} retries: {exc.message}"))
            raise
        raise self.retry(exc=exc, countdown=30)

    except NotFoundError as exc:
        TASK_FAILURES.labels(task_name="process_parsing_job").inc()
        logger.error(f"Parsing job not found: {job_id}")
        return {"parsing_job_id": job_id, "error": exc.message}

    finally:
        duration = time.time() - start_time
        TASK_DURATION.labels(task_name="process_parsing_job").observe(duration)
