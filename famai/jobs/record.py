"""Job records and the status snapshot returned to callers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from famai.jobs.states import JobStatus


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArtifactLocator(BaseModel):
    """Where a finished job's artifact lives in object storage."""

    bucket_key: str
    object_key: str


class Submission(BaseModel):
    """What a backend returns for an accepted submission."""

    job_id: str
    status: str = "pending"
    locator: Optional[ArtifactLocator] = None


class BackendStatus(BaseModel):
    """One raw status observation from a backend."""

    status: str
    progress: Optional[float] = None
    message: str = ""
    report_url: Optional[str] = None


class JobRecord(BaseModel):
    """Tracker-side state of one job."""

    job_id: str
    session_id: str = ""
    status: JobStatus = JobStatus.SUBMITTED
    progress: float = 0.0
    message: str = ""
    simulated: bool = False
    degraded: bool = False
    params: dict[str, Any] = Field(default_factory=dict)
    locator: Optional[ArtifactLocator] = None
    expected_seconds: float = 150.0
    backend_status: Optional[str] = None
    report_url: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
    last_checked: Optional[datetime] = None


class JobStatusReport(BaseModel):
    """Status snapshot; identical shape for real and simulated jobs."""

    job_id: str
    status: JobStatus
    progress: float
    message: str = ""
    estimated_time_remaining: float = 0.0
    """Seconds."""

    simulated: bool = False
    degraded: bool = False
    result_locator: Optional[ArtifactLocator] = None
    last_checked: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
