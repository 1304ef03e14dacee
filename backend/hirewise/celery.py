"""
Celery Application Configuration

Configures Celery for resume field extraction with:
- Redis as message broker and result backend
- Task autodiscovery from hirewise.tasks module
- Late acknowledgement so a lost worker does not lose a parsing job

Usage:
    # Start worker:
    celery -A hirewise.celery worker -Q parsing --loglevel=info

    # Enqueue a task (normally done by CeleryExtractionStrategy):
    from hirewise.tasks.parsing import process_parsing_job
    process_parsing_job.delay("job-123", "resumes/c1.txt")
"""

from celery import Celery
from hirewise.config import get_settings

settings = get_settings()

celery_app = Celery(
    "hirewise",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,

    # Result settings
    result_expires=3600,
    task_track_started=True,

    # Retry settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    task_routes={
        "hirewise.tasks.parsing.process_parsing_job": {"queue": "parsing"},
    },

    task_default_queue="default",
)

celery_app.autodiscover_tasks(["hirewise.tasks"])
