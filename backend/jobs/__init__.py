"""Ingestion jobs, their observability, and the shared runner."""

from .observability import JobContext, JobRecorder
from .registry import JOBS, job_names, run_named_job
from .runner import run_job

__all__ = [
    "JOBS",
    "JobContext",
    "JobRecorder",
    "job_names",
    "run_job",
    "run_named_job",
]
