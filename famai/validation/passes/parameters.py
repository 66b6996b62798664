"""Parameters pass — names, types, formulas, essentials and type bindings."""

from __future__ import annotations

import re
from typing import Any

from famai.config import PARAMETER_NAME_PATTERN, PARAMETER_TYPES
from famai.sir.schema import SIR
from famai.validation.formula import formula_problems, references
from famai.validation.passes.base import Findings, QAPass

_NAME_RE = re.compile(PARAMETER_NAME_PATTERN)

# Parameters a family of each category is expected to carry.  Compared
# after normalisation, so "Sill Height", "SillHeight" and "sill_height" match.
ESSENTIAL_PARAMETERS: dict[str, tuple[str, ...]] = {
    "Doors": ("Width", "Height", "Thickness"),
    "Windows": ("Width", "Height", "Sill Height"),
    "Furniture": ("Width", "Depth", "Height"),
    "Structural Framing": ("Length", "Width", "Height"),
    "Structural Columns": ("Width", "Depth", "Height"),
    "Mechanical Equipment": ("Width", "Depth", "Height"),
    "Electrical Equipment": ("Width", "Depth", "Height"),
    "Plumbing Fixtures": ("Width", "Depth", "Height"),
}

_TRUE_WORDS = ("true", "yes")
_FALSE_WORDS = ("false", "no")


def normalize_name(name: str) -> str:
    return re.sub(r"[\s_]", "", name).lower()


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number  # NaN


def value_problem(value: Any, param_type: str) -> str | None:
    """Return why *value* does not fit *param_type*, or *None* if it does."""
    if param_type in ("Length", "Number"):
        if _as_number(value) is None:
            return "Value must be numeric"
    elif param_type == "Integer":
        number = _as_number(value)
        if number is None or not number.is_integer():
            return "Value must be an integer"
    elif param_type == "YesNo":
        if isinstance(value, bool) or value in (0, 1):
            return None
        if not (isinstance(value, str) and value.strip().lower() in _TRUE_WORDS + _FALSE_WORDS):
            return "Value must be true or false"
    elif param_type in ("Text", "Material"):
        if not isinstance(value, str):
            return "Value must be a string"
    return None


class ParametersPass(QAPass):
    critical = True

    @property
    def name(self) -> str:
        return "parameters"

    @property
    def description(self) -> str:
        return "Parameter naming, types, formulas, essentials and family-type values."

    def check(self, sir: SIR, code: str | None, findings: Findings) -> None:
        params = sir.family_parameters
        if not params:
            findings.issue("parameters.none_defined", "No family parameters defined")

        known = {p.name for p in params}
        seen: set[str] = set()
        for param in params:
            if param.name in seen:
                findings.issue("parameters.duplicate_name", f"Duplicate parameter name: {param.name}")
            seen.add(param.name)

            if not _NAME_RE.match(param.name or ""):
                findings.issue("parameters.invalid_name", f"Invalid parameter name format: {param.name!r}")

            if param.param_type not in PARAMETER_TYPES:
                findings.issue("parameters.invalid_type", f"Invalid parameter type: {param.param_type}")

            if param.formula:
                problems = formula_problems(param.formula, known)
                if param.name in references(param.formula):
                    problems.append("Formula references its own parameter")
                for problem in problems:
                    findings.issue(
                        "parameters.invalid_formula",
                        f"Invalid formula for {param.name}: {problem}",
                    )

        if params:
            present = {normalize_name(n) for n in known}
            for essential in ESSENTIAL_PARAMETERS.get(sir.category, ()):
                if normalize_name(essential) not in present:
                    findings.warning(
                        "parameters.missing_essential",
                        f"Missing essential parameter: {essential}",
                    )

        by_name = {p.name: p for p in params}
        for index, family_type in enumerate(sir.family_types):
            if not family_type.name or not family_type.name.strip():
                findings.issue("parameters.empty_type_name", f"Family type {index} has empty name")
            type_label = family_type.name or f"#{index}"
            for param_name, value in family_type.parameters.items():
                definition = by_name.get(param_name)
                if definition is None:
                    continue
                problem = value_problem(value, definition.param_type)
                if problem:
                    findings.issue(
                        "parameters.invalid_value",
                        f"Invalid value for {param_name} in type {type_label}: {problem}",
                    )
