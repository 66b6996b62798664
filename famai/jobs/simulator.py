"""Simulated execution backend — advances jobs by wall-clock time alone.

Used when the real backend is not configured or rejects a submission.
The schedule over a 15 s job (thresholds scale with the duration):

==========  ============  ===============================
elapsed     status        message
==========  ============  ===============================
0 - 3 s     submitted     Job submitted
3 - 8 s     inprogress    Creating family file...
8 - 15 s    inprogress    Finalizing family file...
>= 15 s     success       Family creation completed
==========  ============  ===============================
"""

from __future__ import annotations

import logging
import struct
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, Field

from famai.config import SIMULATED_JOB_PREFIX, SIMULATED_JOB_SECONDS
from famai.errors import BackendError
from famai.jobs.backend import ExecutionBackend
from famai.jobs.record import ArtifactLocator, BackendStatus, Submission
from famai.store import InMemoryStore, Store

logger = logging.getLogger(__name__)

# Phase boundaries as fractions of the total duration.
_SUBMITTED_UNTIL = 3 / 15
_CREATING_UNTIL = 8 / 15

_HEADER = b"RFA File" + bytes(8) + b"\x01" + bytes(7) + bytes(8)
_PADDING = 1024
_STYLE_CODES = {"DoubleHungWindow": 1, "SlidingDoubleWindow": 2, "FixedWindow": 3}


class SimulatedJob(BaseModel):
    job_id: str
    params: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    cancelled: bool = False


def placeholder_artifact(params: dict[str, Any]) -> bytes:
    """Deterministic stand-in bytes for a family file.

    Layout: 32-byte header, little-endian name length, UTF-8 file name,
    little-endian window style code, zero padding.
    """
    name = str(params.get("FileName") or "Generated Window").encode("utf-8")
    style = (params.get("WindowParams") or {}).get("WindowStyle", "DoubleHungWindow")
    code = _STYLE_CODES.get(style, 1)
    return _HEADER + struct.pack("<I", len(name)) + name + struct.pack("<I", code) + bytes(_PADDING)


class SimulatedBackend(ExecutionBackend):
    """Self-contained stand-in for the execution backend.

    Parameters
    ----------
    duration:
        Seconds from submission to success.
    clock:
        Returns the current time; injectable for tests.
    """

    name = "simulated"
    simulated = True

    def __init__(
        self,
        duration: float = SIMULATED_JOB_SECONDS,
        clock: Callable[[], datetime] | None = None,
        jobs: Store[SimulatedJob] | None = None,
    ) -> None:
        self.duration = duration
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._jobs: Store[SimulatedJob] = jobs if jobs is not None else InMemoryStore()

    def submit(self, params: dict[str, Any]) -> Submission:
        job_id = f"{SIMULATED_JOB_PREFIX}{uuid.uuid4().hex[:12]}"
        self._jobs.put(job_id, SimulatedJob(job_id=job_id, params=params, created_at=self._clock()))
        logger.info("Simulated job %s submitted (%.0f s)", job_id, self.duration)
        return Submission(
            job_id=job_id,
            status="submitted",
            locator=ArtifactLocator(bucket_key="simulated", object_key=f"{job_id}.rfa"),
        )

    def _job(self, job_id: str) -> SimulatedJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise BackendError(f"Unknown simulated job: {job_id}")
        return job

    def elapsed(self, job_id: str) -> float:
        return (self._clock() - self._job(job_id).created_at).total_seconds()

    def status(self, job_id: str) -> BackendStatus:
        job = self._job(job_id)
        if job.cancelled:
            return BackendStatus(status="cancelled", message="Family creation was cancelled")

        elapsed = self.elapsed(job_id)
        if elapsed < self.duration * _SUBMITTED_UNTIL:
            return BackendStatus(status="submitted", message="Job submitted to the execution backend")
        if elapsed < self.duration * _CREATING_UNTIL:
            return BackendStatus(status="inprogress", message="Creating family file...")
        if elapsed < self.duration:
            return BackendStatus(status="inprogress", message="Finalizing family file...")
        return BackendStatus(status="success", message="Family creation completed successfully")

    def cancel(self, job_id: str) -> None:
        job = self._job(job_id)
        job.cancelled = True
        self._jobs.put(job_id, job)

    def fetch(self, job_id: str, locator: ArtifactLocator | None) -> bytes:
        return placeholder_artifact(self._job(job_id).params)
