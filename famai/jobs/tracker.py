"""JobTracker — job registry and status state machine.

Usage::

    from famai.jobs import JobTracker

    tracker = JobTracker(backend)          # backend=None: simulated only
    record = tracker.submit(params, session_id="s1")
    report = tracker.poll(record.job_id)   # call repeatedly; no timers

Real and simulated jobs expose the same status vocabulary; only
``simulated`` on the record and report tells them apart.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from famai.errors import (
    ArtifactRetrievalError,
    BackendConfigError,
    BackendError,
    InvalidTransitionError,
    JobNotFoundError,
)
from famai.jobs.backend import ExecutionBackend
from famai.jobs.record import JobRecord, JobStatusReport
from famai.jobs.simulator import SimulatedBackend
from famai.jobs.states import (
    CANCELLABLE_STATES,
    INPROGRESS_WINDOW,
    STATUS_MESSAGES,
    SUBMITTED_WINDOW,
    JobStatus,
    can_transition,
    normalize_status,
    progress_for,
)
from famai.store import InMemoryStore, Store

logger = logging.getLogger(__name__)

_DEFAULT_EXPECTED_SECONDS = SUBMITTED_WINDOW + INPROGRESS_WINDOW


class JobTracker:
    """Tracks execution jobs through ``submitted -> inprogress -> terminal``.

    Parameters
    ----------
    backend:
        The real execution backend, or *None* to run every job on the
        simulator.
    jobs:
        Store for :class:`JobRecord` objects keyed by job id.
    simulator:
        Fallback backend; built from *clock* when omitted.
    clock:
        Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        backend: ExecutionBackend | None = None,
        jobs: Store[JobRecord] | None = None,
        simulator: SimulatedBackend | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.backend = backend
        self.simulator = simulator or SimulatedBackend(clock=self._clock)
        self.jobs: Store[JobRecord] = jobs if jobs is not None else InMemoryStore()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(
        self,
        params: dict[str, Any],
        session_id: str = "",
        expected_seconds: float | None = None,
    ) -> JobRecord:
        """Submit a job, falling back to the simulator on configuration errors.

        Transient backend errors propagate so the caller can retry.
        """
        backend: ExecutionBackend = self.simulator
        if self.backend is None:
            logger.warning("Execution backend not configured; using simulated mode")
        else:
            try:
                submission = self.backend.submit(params)
                backend = self.backend
            except BackendConfigError as exc:
                logger.warning("Backend rejected submission (%s); using simulated mode", exc)

        if backend is self.simulator:
            submission = self.simulator.submit(params)
            expected = self.simulator.duration
        else:
            expected = expected_seconds or _DEFAULT_EXPECTED_SECONDS

        now = self._clock()
        status = normalize_status(submission.status) or JobStatus.SUBMITTED
        record = JobRecord(
            job_id=submission.job_id,
            session_id=session_id,
            status=status,
            progress=progress_for(status, 0.0),
            message=STATUS_MESSAGES[status],
            simulated=backend.simulated,
            params=params,
            locator=submission.locator,
            expected_seconds=expected,
            backend_status=submission.status,
            created_at=now,
            updated_at=now,
        )
        self.jobs.put(record.job_id, record)
        logger.info(
            "Job %s submitted for session %s (%s)",
            record.job_id, session_id or "-", "simulated" if record.simulated else backend.name,
        )
        return record

    def get(self, job_id: str) -> JobRecord:
        record = self.jobs.get(job_id)
        if record is None:
            raise JobNotFoundError(f"Unknown job: {job_id}")
        return record

    def poll(self, job_id: str) -> JobStatusReport:
        """Observe the backend once and return the updated status.

        Polling failures never raise: the last known state is returned
        with ``degraded`` set.
        """
        record = self.get(job_id)
        if record.status.is_terminal:
            return self._report(record)

        now = self._clock()
        try:
            observed = self._backend_for(record).status(job_id)
        except BackendError as exc:
            logger.warning("Polling job %s failed: %s", job_id, exc)
            record.degraded = True
            record.last_checked = now
            self.jobs.put(job_id, record)
            return self._report(record)

        record.degraded = False
        record.last_checked = now
        record.backend_status = observed.status
        record.report_url = observed.report_url or record.report_url

        new_status = normalize_status(observed.status)
        if new_status is None:
            logger.warning("Job %s: unknown backend status %r", job_id, observed.status)
        elif new_status is not record.status:
            if can_transition(record.status, new_status):
                logger.info("Job %s: %s -> %s", job_id, record.status.value, new_status.value)
                record.status = new_status
            else:
                logger.debug(
                    "Job %s: ignoring %s while %s", job_id, new_status.value, record.status.value,
                )

        elapsed = (now - record.created_at).total_seconds()
        record.progress = progress_for(record.status, elapsed, record.progress)
        record.message = observed.message or STATUS_MESSAGES[record.status]
        record.updated_at = now
        self.jobs.put(job_id, record)
        return self._report(record)

    def cancel(self, job_id: str) -> JobStatusReport:
        """Mark a job cancelled.  The backend is asked to stop, best effort."""
        record = self.get(job_id)
        if record.status not in CANCELLABLE_STATES:
            raise InvalidTransitionError(
                f"Cannot cancel job {job_id} in state {record.status.value}"
            )
        try:
            self._backend_for(record).cancel(job_id)
        except BackendError as exc:
            logger.warning("Backend cancel for %s failed: %s", job_id, exc)

        now = self._clock()
        record.status = JobStatus.CANCELLED
        record.message = STATUS_MESSAGES[JobStatus.CANCELLED]
        record.updated_at = now
        self.jobs.put(job_id, record)
        logger.info("Job %s cancelled", job_id)
        return self._report(record)

    def fetch_artifact(self, job_id: str) -> bytes:
        """Return the artifact of a successful job.

        Raises :class:`ArtifactRetrievalError` when the job has not
        succeeded or the artifact cannot be resolved; the job state is
        left untouched.
        """
        record = self.get(job_id)
        if record.status is not JobStatus.SUCCESS:
            raise ArtifactRetrievalError(
                f"Job {job_id} is {record.status.value}; no artifact available"
            )
        try:
            data = self._backend_for(record).fetch(job_id, record.locator)
        except BackendError as exc:
            raise ArtifactRetrievalError(f"Could not retrieve artifact for {job_id}: {exc}") from exc
        logger.info("Fetched %d bytes for job %s", len(data), job_id)
        return data

    def jobs_for_session(self, session_id: str) -> list[JobRecord]:
        records = [r for r in self.jobs.values() if r.session_id == session_id]
        return sorted(records, key=lambda r: r.created_at)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _backend_for(self, record: JobRecord) -> ExecutionBackend:
        if record.simulated or self.backend is None:
            return self.simulator
        return self.backend

    def _report(self, record: JobRecord) -> JobStatusReport:
        if record.status.is_terminal:
            remaining = 0.0
        else:
            elapsed = (self._clock() - record.created_at).total_seconds()
            remaining = round(max(0.0, record.expected_seconds - elapsed), 1)
        return JobStatusReport(
            job_id=record.job_id,
            status=record.status,
            progress=record.progress,
            message=record.message,
            estimated_time_remaining=remaining,
            simulated=record.simulated,
            degraded=record.degraded,
            result_locator=record.locator if record.status is JobStatus.SUCCESS else None,
            last_checked=record.last_checked,
        )
