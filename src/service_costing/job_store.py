from __future__ import annotations

import threading
import uuid
from datetime import datetime
from typing import Any, Dict, Mapping

from .models.job import JobRecord, JobStatus


class JobStore:
    """In-memory registry of reconciliation jobs."""

    def __init__(self) -> None:
        self._jobs: Dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def create_job(self, *, source: str, record_count: int) -> JobRecord:
        with self._lock:
            job_id = self._generate_id()
            job = JobRecord(
                id=job_id,
                status=JobStatus.queued,
                source=source,
                record_count=record_count,
            )
            self._jobs[job_id] = job
            return job

    def get_job(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def update_job(
        self,
        job_id: str,
        *,
        status: JobStatus | None = None,
        progress: float | None = None,
        report: Mapping[str, Any] | None = None,
        errors: list[str] | None = None,
    ) -> JobRecord:
        with self._lock:
            job = self._jobs[job_id]
            if status is not None:
                job.status = status
            if progress is not None:
                job.progress = progress
            if report is not None:
                job.report = report
            if errors is not None:
                job.errors = list(errors)
            job.updated_at = datetime.utcnow()
            self._jobs[job_id] = job
            return job

    def _generate_id(self) -> str:
        ts = datetime.utcnow().strftime("%Y%m%d%H%M%S")
        suffix = uuid.uuid4().hex[:6]
        return f"rec_{ts}_{suffix}"


__all__ = ["JobStore"]
