"""
Celery Task Modules

Background tasks for resume intake:
- parsing.py: resume field extraction for queued parsing jobs
"""

from hirewise.tasks.parsing import process_parsing_job

__all__ = [
    "process_parsing_job",
]
