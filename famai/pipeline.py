"""FamilyPipeline — the single entry point for prompt-to-family operations.

Usage::

    from famai import FamilyPipeline

    pipeline = FamilyPipeline()                    # offline, simulated jobs
    design = pipeline.create("900 mm wide sliding window", "session-1")
    design.qa.summary()
    design = pipeline.refine("session-1", "make it 1200 mm high")
    job = pipeline.execute("session-1")            # refused unless QA passed
    pipeline.status(job.job_id)
    pipeline.download(job.job_id)

Flow: prompt -> SIR -> QA pre-check -> emitted code -> QA full check ->
job submission -> polling -> artifact.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel

from famai.config import SIMULATED_JOB_SECONDS, Settings, load_settings
from famai.errors import NotReadyError, SessionNotFoundError, SIRStructureError
from famai.generation.artifact import GeneratedCode
from famai.generation.emitter import CodeEmitter
from famai.jobs.backend import ExecutionBackend, build_backend
from famai.jobs.mapping import sir_to_backend_params
from famai.jobs.record import JobRecord, JobStatusReport
from famai.jobs.simulator import SimulatedBackend
from famai.jobs.tracker import JobTracker
from famai.nlp.generator import GenerationResult, SIRGenerator
from famai.nlp.providers import build_provider
from famai.nlp.providers.base import LLMProvider
from famai.session import Session
from famai.store import Store
from famai.validation.gateway import QAGateway
from famai.validation.result import QAResult

logger = logging.getLogger(__name__)


class DesignResult(BaseModel):
    """A generated SIR together with its code artifact and QA verdict.

    ``code`` is *None* only when emission failed closed on a structurally
    incomplete SIR; ``qa`` is then the pre-emission check.
    """

    generation: GenerationResult
    code: Optional[GeneratedCode] = None
    qa: QAResult
    version: int = 0

    @property
    def ready(self) -> bool:
        return self.code is not None and self.qa.overall_pass


class FamilyPipeline:
    """Wires generator, QA gateway, emitter and job tracker together.

    Parameters
    ----------
    provider:
        Language-model collaborator; *None* runs the heuristic path only.
    backend:
        Real execution backend; *None* runs every job on the simulator.
    sessions, jobs:
        Stores for sessions and job records.  In-memory when omitted.
    clock:
        Returns the current time; shared by generator, tracker and simulator.
    """

    def __init__(
        self,
        provider: LLMProvider | None = None,
        backend: ExecutionBackend | None = None,
        *,
        sessions: Store[Session] | None = None,
        jobs: Store[JobRecord] | None = None,
        gateway: QAGateway | None = None,
        emitter: CodeEmitter | None = None,
        clock: Callable[[], datetime] | None = None,
        simulated_job_seconds: float = SIMULATED_JOB_SECONDS,
    ) -> None:
        clock = clock or (lambda: datetime.now(timezone.utc))
        self.generator = SIRGenerator(provider, sessions=sessions, clock=clock)
        self.gateway = gateway or QAGateway()
        self.emitter = emitter or CodeEmitter()
        self.tracker = JobTracker(
            backend,
            jobs=jobs,
            simulator=SimulatedBackend(duration=simulated_job_seconds, clock=clock),
            clock=clock,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> FamilyPipeline:
        """Build a pipeline from environment-driven :class:`Settings`."""
        settings = settings or load_settings()
        return cls(
            build_provider(settings),
            build_backend(settings),
            simulated_job_seconds=settings.simulated_job_seconds,
        )

    @property
    def sessions(self) -> Store[Session]:
        return self.generator.sessions

    # ------------------------------------------------------------------
    # Design
    # ------------------------------------------------------------------

    def create(self, prompt: str, session_id: str) -> DesignResult:
        """Generate a new current design for *session_id*."""
        generation = self.generator.generate(prompt, session_id)
        return self._assess(generation, store=True)

    def refine(self, session_id: str, feedback: str) -> DesignResult:
        """Apply *feedback* to the current design; the version increments."""
        generation = self.generator.refine(session_id, feedback)
        return self._assess(generation, store=True)

    def variations(self, session_id: str, count: int = 3) -> list[DesignResult]:
        """Assessed siblings of the current design.  The design itself is unchanged."""
        session = self.session(session_id)
        if session.current_sir is None:
            raise SessionNotFoundError(f"No design in session {session_id}")
        generations = self.generator.generate_variations(session.current_sir, count, session_id)
        return [self._assess(g, store=False) for g in generations]

    def session(self, session_id: str) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Unknown session: {session_id}")
        return session

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, session_id: str) -> JobRecord:
        """Submit the session's current design for family creation.

        Raises :class:`NotReadyError` unless the latest QA run passed.
        """
        session = self.session(session_id)
        if session.current_sir is None:
            raise SessionNotFoundError(f"No design in session {session_id}")
        if session.last_qa is None or not session.last_qa.overall_pass:
            raise NotReadyError(
                f"Session {session_id} v{session.version} has not passed QA; "
                "refine the design before executing"
            )

        params = sir_to_backend_params(session.current_sir)
        expected = session.code.metadata.estimated_execution_time if session.code else None
        record = self.tracker.submit(params, session_id=session_id, expected_seconds=expected)

        session.job_ids.append(record.job_id)
        session.updated_at = record.created_at
        self.sessions.put(session_id, session)
        return record

    def status(self, job_id: str) -> JobStatusReport:
        return self.tracker.poll(job_id)

    def cancel(self, job_id: str) -> JobStatusReport:
        return self.tracker.cancel(job_id)

    def download(self, job_id: str) -> bytes:
        return self.tracker.fetch_artifact(job_id)

    def jobs(self, session_id: str) -> list[JobRecord]:
        return self.tracker.jobs_for_session(session_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _assess(self, generation: GenerationResult, store: bool) -> DesignResult:
        sir = generation.sir
        qa = self.gateway.validate(sir)
        code: GeneratedCode | None = None
        try:
            code = self.emitter.emit(sir)
        except SIRStructureError as exc:
            logger.warning("Emission refused for %s: %s", sir.family_name or "<unnamed>", exc)
        else:
            qa = self.gateway.validate(sir, code.code)

        if store:
            session = self.session(generation.session_id)
            session.code = code
            session.last_qa = qa
            self.sessions.put(session.session_id, session)
        return DesignResult(generation=generation, code=code, qa=qa, version=generation.version)
