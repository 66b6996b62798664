"""Exception taxonomy for the family pipeline.

QA failures are never raised; they are reported as data on
:class:`~famai.validation.result.QAResult`.
"""

from __future__ import annotations


class FamaiError(Exception):
    """Base class for all pipeline errors."""


class SIRStructureError(FamaiError):
    """A SIR is missing required sections or violates a structural invariant."""


class ModelResponseError(SIRStructureError):
    """A language-model reply did not contain a usable JSON object."""


class GenerationError(FamaiError):
    """Neither the model path nor the heuristic path produced a SIR."""


class SessionNotFoundError(FamaiError):
    """No session is stored under the given id."""


class BackendError(FamaiError):
    """Base class for execution-backend failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendConfigError(BackendError):
    """Backend configuration is absent or a submission was rejected (4xx).

    The tracker substitutes the simulated backend when it sees this.
    """


class BackendTransientError(BackendError):
    """Network failure or 5xx reply; the caller may retry."""


class ArtifactRetrievalError(FamaiError):
    """The result locator of a finished job could not be resolved."""


class JobNotFoundError(FamaiError):
    """No job is stored under the given id."""


class InvalidTransitionError(FamaiError):
    """A job-state transition is not allowed from the current state."""


class NotReadyError(FamaiError):
    """The session's current design has not passed QA; execution is refused."""
