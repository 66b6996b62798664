"""Performance pass — geometry and parameter load, code anti-patterns."""

from __future__ import annotations

from famai.config import MAX_CODE_COMPLEXITY, MAX_PARAMETERS, MAX_TOTAL_PROFILE_POINTS
from famai.sir.schema import SIR
from famai.validation.passes.base import Findings, QAPass

COMPLEXITY_INDICATORS = ("if ", "for ", "while ", "try:", "except", "def ", "class ")

# Loop constructs without a fixed small bound.
LOOP_ANTIPATTERNS = ("while ", "for i in range(1000)")

_LOW_LOD = 200
_LOW_LOD_MAX_EXTRUSIONS = 2


def code_complexity(code: str) -> int:
    """Two points per control-flow or definition keyword occurrence."""
    return sum(code.count(indicator) * 2 for indicator in COMPLEXITY_INDICATORS)


class PerformancePass(QAPass):
    """Advisory: never gates the overall verdict."""

    @property
    def name(self) -> str:
        return "performance"

    @property
    def description(self) -> str:
        return "Profile-point and parameter counts, code complexity, unbounded loops."

    def check(self, sir: SIR, code: str | None, findings: Findings) -> None:
        if code is not None:
            complexity = code_complexity(code)
            findings.result.details["code_complexity"] = complexity
            findings.result.details["lines_of_code"] = len(code.splitlines())
            if complexity > MAX_CODE_COMPLEXITY:
                findings.warning(
                    "performance.code_complexity",
                    f"High code complexity detected ({complexity}); may impact performance",
                )
            if any(pattern in code for pattern in LOOP_ANTIPATTERNS):
                findings.issue(
                    "performance.loop_antipattern",
                    "Performance anti-pattern detected: unbounded loop",
                )

        total_points = sum(len(e.profile) for e in sir.extrusions)
        findings.result.details["profile_points"] = total_points
        if total_points > MAX_TOTAL_PROFILE_POINTS:
            findings.warning(
                "performance.profile_points",
                f"High geometry complexity ({total_points} profile points); consider optimization",
            )

        count = len(sir.family_parameters)
        if count > MAX_PARAMETERS:
            findings.warning(
                "performance.parameter_count",
                f"High parameter count ({count}); may impact family performance",
            )

        lod = sir.lod_level
        if lod is not None and lod <= _LOW_LOD and len(sir.extrusions) > _LOW_LOD_MAX_EXTRUSIONS:
            findings.warning(
                "performance.lod_geometry",
                f"LOD {lod} family should have minimal geometry for performance",
            )
