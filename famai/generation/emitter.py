"""CodeEmitter — main entry point for SIR-to-script translation.

Usage::

    from famai.generation import CodeEmitter

    emitter = CodeEmitter()
    generated = emitter.emit(sir)
    generated.code, generated.metadata.estimated_execution_time
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from famai.config import (
    BASE_EXECUTION_SECONDS,
    MAX_EXECUTION_SECONDS,
    SECONDS_PER_EXTRUSION,
    SECONDS_PER_FAMILY_TYPE,
    SECONDS_PER_PARAMETER,
)
from famai.generation.artifact import CodeMetadata, GeneratedCode
from famai.generation.optimizations import DEFAULT_RULES, OptimizationRule, optimize
from famai.generation.sections import SECTION_WRITERS
from famai.sir.schema import SIR
from famai.sir.structure import check_emittable

logger = logging.getLogger(__name__)


def estimate_execution_time(sir: SIR) -> int:
    """Seconds: base + per extrusion + per parameter + per family type, capped."""
    seconds = (
        BASE_EXECUTION_SECONDS
        + SECONDS_PER_EXTRUSION * len(sir.extrusions)
        + SECONDS_PER_PARAMETER * len(sir.family_parameters)
        + SECONDS_PER_FAMILY_TYPE * len(sir.family_types)
    )
    return min(seconds, MAX_EXECUTION_SECONDS)


def complexity_score(sir: SIR) -> int:
    return 2 * len(sir.extrusions) + len(sir.family_parameters) + 2 * len(sir.family_types)


class CodeEmitter:
    """Deterministic section-by-section script writer.

    Parameters
    ----------
    rules:
        Ordered optimization rules applied to the combined script.
    """

    def __init__(self, rules: tuple[OptimizationRule, ...] = DEFAULT_RULES) -> None:
        self.rules = rules

    def emit(self, sir: SIR | dict[str, Any]) -> GeneratedCode:
        """Translate *sir* into a family-creation script.

        Raises :class:`~famai.errors.SIRStructureError` before writing
        anything when a required section is missing.
        """
        sir = check_emittable(sir)

        sections = {name: writer(sir) for name, writer in SECTION_WRITERS}
        combined = "\n\n".join(sections.values()) + "\n"
        code, applied = optimize(combined, sir, self.rules)

        metadata = CodeMetadata(
            family_name=sir.family_name,
            category=sir.category,
            lod_level=sir.lod_level,
            code_length=len(code),
            estimated_execution_time=estimate_execution_time(sir),
            complexity_score=complexity_score(sir),
            optimizations=applied,
            generated_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Emitted %d chars for %s (LOD %s, optimizations: %s)",
            len(code), sir.family_name, sir.lod_level, ", ".join(applied) or "none",
        )
        return GeneratedCode(code=code, metadata=metadata, sections=sections)
