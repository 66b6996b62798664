"""Job tracking — submit emitted families for execution and follow them to completion."""

from famai.jobs.backend import DesignAutomationBackend, ExecutionBackend, build_backend
from famai.jobs.mapping import sir_to_backend_params
from famai.jobs.record import ArtifactLocator, BackendStatus, JobRecord, JobStatusReport, Submission
from famai.jobs.simulator import SimulatedBackend, placeholder_artifact
from famai.jobs.states import JobStatus, can_transition, normalize_status, progress_for
from famai.jobs.tracker import JobTracker

__all__ = [
    "ArtifactLocator",
    "BackendStatus",
    "DesignAutomationBackend",
    "ExecutionBackend",
    "JobRecord",
    "JobStatus",
    "JobStatusReport",
    "JobTracker",
    "SimulatedBackend",
    "Submission",
    "build_backend",
    "can_transition",
    "normalize_status",
    "placeholder_artifact",
    "progress_for",
    "sir_to_backend_params",
]
