"""Job states, legal transitions and the time-based progress ramp.

::

    submitted -> inprogress -> success | failed | cancelled
    submitted -> success | failed | cancelled

Progress is derived from elapsed time, not reported by the backend:
5 -> 20 % over the first 30 s while submitted, 20 -> 90 % over the next
120 s while in progress, exactly 100 % only on success.
"""

from __future__ import annotations

from enum import Enum


class JobStatus(str, Enum):
    SUBMITTED = "submitted"
    INPROGRESS = "inprogress"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({JobStatus.SUCCESS, JobStatus.FAILED, JobStatus.CANCELLED})

_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.SUBMITTED: frozenset({
        JobStatus.INPROGRESS, JobStatus.SUCCESS, JobStatus.FAILED, JobStatus.CANCELLED,
    }),
    JobStatus.INPROGRESS: frozenset({JobStatus.SUCCESS, JobStatus.FAILED, JobStatus.CANCELLED}),
    JobStatus.SUCCESS: frozenset(),
    JobStatus.FAILED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}

CANCELLABLE_STATES = frozenset({JobStatus.SUBMITTED, JobStatus.INPROGRESS})

# Progress ramp
SUBMITTED_START = 5.0
SUBMITTED_END = 20.0
SUBMITTED_WINDOW = 30.0
INPROGRESS_END = 90.0
INPROGRESS_WINDOW = 120.0
COMPLETE = 100.0

STATUS_MESSAGES: dict[JobStatus, str] = {
    JobStatus.SUBMITTED: "Job is queued for processing...",
    JobStatus.INPROGRESS: "Family is being created...",
    JobStatus.SUCCESS: "Family creation completed successfully",
    JobStatus.FAILED: "Family creation failed",
    JobStatus.CANCELLED: "Family creation was cancelled",
}


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in _TRANSITIONS[current]


def normalize_status(raw: str | None) -> JobStatus | None:
    """Map a backend status string onto the external vocabulary.

    ``pending`` reads as submitted; every ``failed*`` variant reads as
    failed.  Unknown strings return *None*.
    """
    if not raw:
        return None
    value = raw.strip().lower()
    if value in ("pending", "submitted", "queued"):
        return JobStatus.SUBMITTED
    if value in ("inprogress", "in_progress", "running"):
        return JobStatus.INPROGRESS
    if value in ("success", "succeeded", "complete", "completed"):
        return JobStatus.SUCCESS
    if value.startswith("failed") or value == "error":
        return JobStatus.FAILED
    if value in ("cancelled", "canceled"):
        return JobStatus.CANCELLED
    return None


def progress_for(status: JobStatus, elapsed: float, last: float = 0.0) -> float:
    """Derived progress percentage for *status* after *elapsed* seconds.

    Never lower than *last*; never 100 unless *status* is success.
    Failed and cancelled jobs keep their last progress.
    """
    elapsed = max(0.0, elapsed)
    if status is JobStatus.SUCCESS:
        return COMPLETE
    if status is JobStatus.SUBMITTED:
        fraction = min(elapsed, SUBMITTED_WINDOW) / SUBMITTED_WINDOW
        value = SUBMITTED_START + (SUBMITTED_END - SUBMITTED_START) * fraction
    elif status is JobStatus.INPROGRESS:
        fraction = min(max(elapsed - SUBMITTED_WINDOW, 0.0), INPROGRESS_WINDOW) / INPROGRESS_WINDOW
        value = SUBMITTED_END + (INPROGRESS_END - SUBMITTED_END) * fraction
    else:
        value = last
    return round(min(max(value, last), INPROGRESS_END), 1)
