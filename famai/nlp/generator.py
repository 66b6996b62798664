"""SIRGenerator — main entry point for natural-language SIR generation.

Usage::

    from famai.nlp import SIRGenerator

    generator = SIRGenerator()          # offline: heuristic extractor only
    result = generator.generate("900 mm wide sliding window", "session-1")
    result.sir, result.source           # SIR, "heuristic"

With a provider configured the model path is tried first.  Any failure
in the model call, the reply parsing or the structural check falls back
to the heuristic extractor; the result's ``source`` records which path
produced the SIR.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, Field

from famai.config import CONTEXT_TURNS
from famai.errors import GenerationError, SessionNotFoundError, SIRStructureError
from famai.nlp.heuristic import DesignValues, HeuristicExtractor, apply_report
from famai.nlp.prompts import (
    ModelPrompt,
    build_generation_prompt,
    build_refinement_prompt,
    build_variation_prompt,
)
from famai.nlp.providers.base import LLMProvider
from famai.session import ConversationTurn, Session
from famai.sir.schema import SIR
from famai.sir.structure import parse_sir_response
from famai.store import InMemoryStore, Store

logger = logging.getLogger(__name__)

SOURCE_MODEL = "model"
SOURCE_HEURISTIC = "heuristic"

# Plan-scale factors for offline variations, cycled by index.
_VARIATION_FACTORS = (0.8, 1.2, 0.9, 1.1, 0.75, 1.25)


class GenerationResult(BaseModel):
    """A SIR tagged with the path that produced it."""

    sir: SIR
    source: str
    """Source: 'model' or 'heuristic'."""

    session_id: str = ""
    kind: str = "generation"
    version: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_heuristic(self) -> bool:
        return self.source == SOURCE_HEURISTIC


class SIRGenerator:
    """Produce SIRs from prompts, optionally through a language model.

    Parameters
    ----------
    provider:
        Language-model collaborator.  *None* (or an unavailable provider)
        means every request goes straight to the heuristic extractor.
    sessions:
        Store holding :class:`Session` objects.  Defaults to an in-memory
        store private to this generator.
    clock:
        Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        provider: LLMProvider | None = None,
        sessions: Store[Session] | None = None,
        extractor: HeuristicExtractor | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._provider = provider
        self._extractor = extractor or HeuristicExtractor()
        self.sessions: Store[Session] = sessions if sessions is not None else InMemoryStore()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(
        self,
        prompt: str,
        session_id: str,
        prior_context: dict[str, Any] | None = None,
    ) -> GenerationResult:
        """Generate a SIR for *prompt* and make it the session's current design."""
        prompt = prompt.strip()
        warnings: list[str] = []
        if not prompt:
            warnings.append("Empty prompt; using default dimensions.")

        context = prior_context if prior_context is not None else self.get_context(session_id)
        sir = None
        if prompt and self._model_ready():
            sir = self._ask_model(build_generation_prompt(prompt, context))

        if sir is not None:
            source = SOURCE_MODEL
        else:
            logger.debug("Using heuristic extractor for: %s", prompt[:80])
            sir = self._heuristic(prompt, warnings)
            source = SOURCE_HEURISTIC

        return self._commit(session_id, prompt, sir, source, "generation", warnings)

    def refine(
        self,
        session_id: str,
        feedback: str,
        current_sir: SIR | None = None,
    ) -> GenerationResult:
        """Apply *feedback* to the session's SIR and supersede it.

        Falls back to re-extracting the feedback heuristically when the
        model path is unavailable or fails.  A design the heuristic path
        built is rebuilt from the updated values; any other design is
        copied with only the mentioned dimensions and materials patched.
        """
        if current_sir is None:
            session = self.sessions.get(session_id)
            if session is None or session.current_sir is None:
                raise SessionNotFoundError(f"No design to refine in session {session_id}")
            current_sir = session.current_sir

        warnings: list[str] = []
        sir = None
        if self._model_ready():
            prompt = build_refinement_prompt(
                feedback, current_sir.to_dict(), self.get_context(session_id),
            )
            sir = self._ask_model(prompt)

        if sir is not None:
            source = SOURCE_MODEL
        else:
            logger.debug("Refining heuristically: %s", feedback[:80])
            base = DesignValues.from_sir(current_sir)
            report = self._extractor.analyze(feedback, base=base)
            warnings.extend(report.warnings)
            if not report.matched:
                warnings.append("No dimensions recognised in feedback; dimensions unchanged.")
            if self._extractor.build(base) == current_sir:
                sir = self._extractor.build(report.values)
            else:
                sir = apply_report(current_sir, report)
            source = SOURCE_HEURISTIC

        return self._commit(session_id, f"Refinement: {feedback}", sir, source, "refinement", warnings)

    def generate_variations(
        self,
        base_sir: SIR,
        count: int = 5,
        session_id: str | None = None,
    ) -> list[GenerationResult]:
        """Return *count* sibling designs of *base_sir*.

        Each variation is an independent model call.  A failed call yields
        a deterministic plan-scaled sibling instead.  Variations are
        recorded in the session history but do not supersede its design.
        """
        results: list[GenerationResult] = []
        session = self.sessions.get(session_id) if session_id else None
        base_data = base_sir.to_dict()

        for index in range(count):
            sir = None
            if self._model_ready():
                sir = self._ask_model(build_variation_prompt(base_data, index + 1))
            if sir is not None:
                source = SOURCE_MODEL
            else:
                sir = scale_variation(base_sir, index)
                source = SOURCE_HEURISTIC

            result = GenerationResult(
                sir=sir,
                source=source,
                session_id=session_id or "",
                kind="variation",
                version=session.version if session else 0,
                timestamp=self._clock(),
            )
            if session is not None:
                session.add_turn(ConversationTurn(
                    timestamp=result.timestamp,
                    prompt=f"Variation {index + 1}",
                    sir=sir,
                    kind="variation",
                    source=source,
                ))
            results.append(result)

        if session is not None:
            self.sessions.put(session.session_id, session)
        logger.info("Generated %d variations of %s", len(results), base_sir.family_name)
        return results

    def get_context(self, session_id: str) -> dict[str, Any]:
        """Summarise the recent turns of a session for prompt context."""
        session = self.sessions.get(session_id)
        history = session.history if session else []
        return {
            "recentInteractions": [t.to_context() for t in history[-CONTEXT_TURNS:]],
            "totalInteractions": len(history),
            "sessionId": session_id,
        }

    def history(self, session_id: str) -> list[ConversationTurn]:
        session = self.sessions.get(session_id)
        return list(session.history) if session else []

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _model_ready(self) -> bool:
        if self._provider is None:
            return False
        try:
            return self._provider.is_available()
        except Exception:
            logger.debug("Provider availability check failed", exc_info=True)
            return False

    def _ask_model(self, prompt: ModelPrompt) -> SIR | None:
        """Run one model round-trip.  Returns *None* on any failure."""
        if self._provider is None:
            return None
        try:
            raw = self._provider.complete(prompt.user, system=prompt.system)
        except Exception:
            logger.debug("Model call raised", exc_info=True)
            return None
        if raw is None:
            logger.debug("Model returned no response")
            return None
        try:
            return parse_sir_response(raw)
        except SIRStructureError as exc:
            logger.debug("Model reply rejected: %s", exc)
            return None

    def _heuristic(self, prompt: str, warnings: list[str]) -> SIR:
        try:
            report = self._extractor.analyze(prompt)
            warnings.extend(report.warnings)
            return self._extractor.build(report.values)
        except Exception as exc:
            raise GenerationError(f"Heuristic extraction failed: {exc}") from exc

    def _commit(
        self,
        session_id: str,
        prompt: str,
        sir: SIR,
        source: str,
        kind: str,
        warnings: list[str],
    ) -> GenerationResult:
        now = self._clock()
        session = self.sessions.get(session_id) or Session(session_id=session_id, created_at=now)
        version = session.supersede(sir, source)
        session.add_turn(ConversationTurn(timestamp=now, prompt=prompt, sir=sir, kind=kind, source=source))
        self.sessions.put(session_id, session)

        logger.info(
            "Session %s: %s v%d (%s, %s)", session_id, sir.family_name, version, kind, source,
        )
        return GenerationResult(
            sir=sir,
            source=source,
            session_id=session_id,
            kind=kind,
            version=version,
            timestamp=now,
            warnings=warnings,
        )


def scale_variation(base_sir: SIR, index: int) -> SIR:
    """Return a copy of *base_sir* scaled in plan by a fixed factor for *index*."""
    factor = _VARIATION_FACTORS[index % len(_VARIATION_FACTORS)]
    sir = base_sir.model_copy(deep=True)

    if sir.family_metadata is not None:
        sir.family_metadata.family_name = f"{base_sir.family_name} Variation {index + 1}"

    for extrusion in sir.extrusions:
        for point in extrusion.profile:
            point.x *= factor
            point.y *= factor
        for end in (extrusion.start_point, extrusion.end_point):
            end.x *= factor
            end.y *= factor

    scaled: set[str] = set()
    for param in sir.family_parameters:
        name = param.name.lower()
        if param.param_type != "Length" or "sill" in name:
            continue
        if "width" not in name and "height" not in name:
            continue
        if isinstance(param.default_value, (int, float)) and not isinstance(param.default_value, bool):
            param.default_value = param.default_value * factor
            scaled.add(param.name)

    for family_type in sir.family_types:
        for name in scaled:
            value = family_type.parameters.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                family_type.parameters[name] = value * factor
    return sir
