"""Post-emission text rewrites keyed to the family's LOD."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from famai.generation.sections import DETAIL, VOID
from famai.sir.schema import SIR

_LOW_LOD = 200
GEOMETRY_CONSOLIDATION_THRESHOLD = 5


def _role_lines(role: str) -> re.Pattern[str]:
    return re.compile(rf"^.*\b{role}_(?:sketch|curves|profile|obj|material)\b.*\n?", re.MULTILINE)


_COMMENT_LINE = re.compile(r"^[ \t]*#.*\n?", re.MULTILINE)
_DETAIL_LINES = _role_lines(DETAIL)
_VOID_LINES = _role_lines(VOID)


def _low_lod(sir: SIR) -> bool:
    return sir.lod_level is not None and sir.lod_level <= _LOW_LOD


@dataclass(frozen=True)
class OptimizationRule:
    name: str
    applies: Callable[[SIR], bool]
    pattern: re.Pattern[str]

    def apply(self, code: str, sir: SIR) -> str:
        if not self.applies(sir):
            return code
        return self.pattern.sub("", code)


# Applied in order.
DEFAULT_RULES: tuple[OptimizationRule, ...] = (
    OptimizationRule("strip_comments", _low_lod, _COMMENT_LINE),
    OptimizationRule("simplified_geometry", _low_lod, _DETAIL_LINES),
    OptimizationRule("minimize_voids", _low_lod, _VOID_LINES),
)


def optimize(
    code: str,
    sir: SIR,
    rules: tuple[OptimizationRule, ...] = DEFAULT_RULES,
) -> tuple[str, list[str]]:
    """Apply *rules* to *code*; return the new code and the rules that changed it."""
    applied: list[str] = []
    for rule in rules:
        rewritten = rule.apply(code, sir)
        if rewritten != code:
            applied.append(rule.name)
            code = rewritten
    if len(sir.extrusions) > GEOMETRY_CONSOLIDATION_THRESHOLD:
        applied.append("geometry_consolidation")
    return code, applied
