"""
Tests for Celery Background Tasks

Tests cover:
- Celery app configuration
- execute_parsing_job worker body against a real tracker
- process_parsing_job retries on storage failures, then fails the job
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from hirewise.celery import celery_app
from hirewise.exceptions import ExtractionError, NotFoundError, StorageError
from hirewise.models import JobStatus
from hirewise.services.extraction import CeleryExtractionStrategy
from hirewise.services.parsing_tracker import ParsingJobTracker
from hirewise.tasks.parsing import execute_parsing_job, fail_parsing_job, process_parsing_job


class TestCeleryApp:
    """Test Celery app configuration."""

    def test_celery_app_exists(self):
        assert celery_app is not None
        assert celery_app.main == "hirewise"

    def test_celery_uses_redis_broker(self):
        assert "redis" in celery_app.conf.broker_url

    def test_parsing_task_routed_to_parsing_queue(self):
        routes = celery_app.conf.task_routes
        assert routes["hirewise.tasks.parsing.process_parsing_job"] == {"queue": "parsing"}

    def test_process_parsing_job_is_celery_task(self):
        assert hasattr(process_parsing_job, "delay")
        assert hasattr(process_parsing_job, "apply_async")


@pytest.fixture
def tracker(job_store):
    return ParsingJobTracker(job_store, CeleryExtractionStrategy(dispatcher=MagicMock()))


def extractor_returning(fields=None, error=None):
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=fields, side_effect=error)
    return extractor


class TestExecuteParsingJob:
    """Test the worker body against a real tracker and database."""

    @pytest.mark.asyncio
    async def test_completes_job_and_writes_fields(self, tracker, candidate_store):
        await candidate_store.add_candidate(id="c1")
        handle = await tracker.submit("c1", "resumes/c1.txt")
        extractor = extractor_returning({"current_role": "Fleet Manager", "location": "Hyderabad"})

        status = await execute_parsing_job(tracker, extractor, handle.id, "resumes/c1.txt")

        assert status == "completed"
        job = await tracker.get_status(handle.id)
        assert job.status == "completed"
        assert job.completed_at is not None
        candidate = await candidate_store.get_candidate("c1")
        assert candidate.current_role == "Fleet Manager"
        assert candidate.file_url == "resumes/c1.txt"

    @pytest.mark.asyncio
    async def test_extraction_error_fails_job(self, tracker):
        handle = await tracker.submit("c1", "resumes/c1.txt")
        extractor = extractor_returning(error=ExtractionError("Could not read resume"))

        status = await execute_parsing_job(tracker, extractor, handle.id, "resumes/c1.txt")

        assert status == "failed"
        job = await tracker.get_status(handle.id)
        assert job.error_message == "Could not read resume"

    @pytest.mark.asyncio
    async def test_terminal_job_is_skipped(self, tracker):
        handle = await tracker.submit("c1", "resumes/c1.txt")
        await tracker.advance(handle.id, JobStatus.FAILED)
        extractor = extractor_returning({})

        status = await execute_parsing_job(tracker, extractor, handle.id, "resumes/c1.txt")

        assert status == "failed"
        extractor.extract.assert_not_called()

    @pytest.mark.asyncio
    async def test_retry_resumes_from_processing(self, tracker):
        handle = await tracker.submit("c1", "resumes/c1.txt")
        await tracker.advance(handle.id, JobStatus.PROCESSING)

        status = await execute_parsing_job(tracker, extractor_returning({}), handle.id, "resumes/c1.txt")

        assert status == "completed"

    @pytest.mark.asyncio
    async def test_storage_error_leaves_job_processing(self, tracker, job_store):
        original = job_store.complete_job
        job_store.complete_job = AsyncMock(side_effect=StorageError("db locked"))
        handle = await tracker.submit("c1", "resumes/c1.txt")

        with pytest.raises(StorageError):
            await execute_parsing_job(tracker, extractor_returning({}), handle.id, "resumes/c1.txt")
        job_store.complete_job = original

        job = await tracker.get_status(handle.id)
        assert job.status == "processing"

    @pytest.mark.asyncio
    async def test_missing_candidate_fails_job(self, tracker):
        handle = await tracker.submit("ghost", "resumes/ghost.txt")

        status = await execute_parsing_job(
            tracker, extractor_returning({"location": "Pune"}), handle.id, "resumes/ghost.txt"
        )

        assert status == "failed"

    @pytest.mark.asyncio
    async def test_fail_releases_processing_job(self, tracker, job_store, settings):
        handle = await tracker.submit("c1", "resumes/c1.txt")
        await tracker.advance(handle.id, JobStatus.PROCESSING)

        with patch("hirewise.tasks.parsing.get_settings", return_value=settings):
            assert await fail_parsing_job(handle.id, "Storage failure after 3 retries: db locked") is True

        job = await tracker.get_status(handle.id)
        assert job.status == "failed"
        assert job.error_message == "Storage failure after 3 retries: db locked"
        assert await job_store.get_active_job("c1") is None

    @pytest.mark.asyncio
    async def test_unknown_job(self, tracker):
        with pytest.raises(NotFoundError):
            await execute_parsing_job(tracker, extractor_returning({}), "missing", "r1.pdf")


class TestProcessParsingJobTask:
    """Test the Celery task wrapper (worker body mocked)."""

    @patch("hirewise.tasks.parsing._process", new_callable=MagicMock)
    @patch("hirewise.tasks.parsing.run_async")
    def test_returns_final_status(self, mock_run_async, mock_process):
        mock_run_async.return_value = "completed"

        result = process_parsing_job.run("job-1", "r1.pdf")

        assert result == {"parsing_job_id": "job-1", "status": "completed"}
        mock_process.assert_called_once_with("job-1", "r1.pdf")

    @patch("hirewise.tasks.parsing._process", new_callable=MagicMock)
    @patch("hirewise.tasks.parsing.run_async")
    def test_storage_error_is_retried(self, mock_run_async, mock_process):
        mock_run_async.side_effect = StorageError("db locked")

        with patch.object(process_parsing_job, "retry", side_effect=RuntimeError("retry")) as mock_retry:
            with pytest.raises(RuntimeError, match="retry"):
                process_parsing_job.run("job-1", "r1.pdf")

        assert isinstance(mock_retry.call_args.kwargs["exc"], StorageError)

    @patch("hirewise.tasks.parsing._process", new_callable=MagicMock)
    @patch("hirewise.tasks.parsing.run_async")
    def test_unknown_job_is_not_retried(self, mock_run_async, mock_process):
        mock_run_async.side_effect = NotFoundError("Parsing job not found")

        result = process_parsing_job.run("missing", "r1.pdf")

        assert result == {"parsing_job_id": "missing", "error": "Parsing job not found"}

    @patch("hirewise.tasks.parsing.fail_parsing_job", new_callable=MagicMock)
    @patch("hirewise.tasks.parsing._process", new_callable=MagicMock)
    @patch("hirewise.tasks.parsing.run_async")
    def test_exhausted_retries_fail_job(self, mock_run_async, mock_process, mock_fail):
        mock_run_async.side_effect = [StorageError("db locked"), True]

        process_parsing_job.push_request(retries=process_parsing_job.max_retries)
        try:
            with patch.object(process_parsing_job, "retry") as mock_retry:
                with pytest.raises(StorageError):
                    process_parsing_job.run("job-1", "r1.pdf")
        finally:
            process_parsing_job.pop_request()

        mock_retry.assert_not_called()
        mock_fail.assert_called_once()
        assert mock_fail.call_args.args[0] == "job-1"
        assert "db locked" in mock_fail.call_args.args[1]
        assert mock_run_async.call_count == 2
