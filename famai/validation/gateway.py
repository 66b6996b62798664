"""QAGateway — main entry point for SIR quality assurance.

Usage::

    from famai.validation import QAGateway

    gateway = QAGateway()
    qa = gateway.validate(sir, code)
    qa.overall_pass, qa.recommendations
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError

from famai.config import DEFAULT_DEDUCTIONS
from famai.errors import SIRStructureError
from famai.sir.schema import SIR
from famai.validation.passes import QAPass, default_passes
from famai.validation.result import QAResult
from famai.validation.suggestions import build_recommendations

logger = logging.getLogger(__name__)


class QAGateway:
    """Runs every registered pass over a SIR and aggregates the verdict.

    The overall verdict is the conjunction of the *critical* passes
    (geometry, parameters, metadata); the others are advisory.

    Parameters
    ----------
    deductions:
        Overrides for the point deductions in :data:`DEFAULT_DEDUCTIONS`.
    passes:
        Replaces the built-in passes entirely.
    """

    def __init__(
        self,
        deductions: Mapping[str, int] | None = None,
        passes: list[QAPass] | None = None,
    ) -> None:
        self.deductions: dict[str, int] = dict(DEFAULT_DEDUCTIONS)
        if deductions:
            self.deductions.update(deductions)
        self.passes: list[QAPass] = passes if passes is not None else default_passes()

    def add_pass(self, qa_pass: QAPass) -> None:
        """Register an additional pass.  A pass with an existing name replaces it."""
        self.passes = [p for p in self.passes if p.name != qa_pass.name]
        self.passes.append(qa_pass)

    def validate(self, sir: SIR | dict[str, Any], code: str | None = None) -> QAResult:
        """Validate *sir* (and the emitted *code*, when given).

        QA failures are reported on the result, never raised.
        """
        if isinstance(sir, dict):
            try:
                sir = SIR.from_dict(sir)
            except ValidationError as exc:
                raise SIRStructureError(
                    f"SIR does not match schema: {exc.error_count()} errors"
                ) from exc

        validations = {}
        for qa_pass in self.passes:
            validations[qa_pass.name] = qa_pass.run(sir, code, self.deductions)

        critical = [v for v in validations.values() if v.critical]
        overall = bool(critical) and all(v.passed for v in critical)

        result = QAResult(
            family_name=sir.family_name,
            category=sir.category,
            lod_level=sir.lod_level,
            validations=validations,
            overall_pass=overall,
            recommendations=build_recommendations(validations),
            timestamp=datetime.now(timezone.utc),
        )
        logger.info("QA %s: %s", sir.family_name or "<unnamed>", result.summary())
        return result
