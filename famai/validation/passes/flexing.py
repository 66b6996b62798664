"""Flexing pass — formulas must stay valid across a range of parameter values."""

from __future__ import annotations

from typing import Any

from famai.sir.schema import SIR, FamilyParameter
from famai.validation.formula import formula_problems, references, substitute
from famai.validation.passes.base import Findings, QAPass

FLEX_SCALES = (0.1, 1, 10, 100)
FLEXED_TYPES = ("Length", "Number")


def flex_values(param: FamilyParameter) -> list[Any]:
    """The parameter's default followed by the representative scales."""
    values: list[Any] = []
    if param.default_value is not None:
        values.append(param.default_value)
    values.extend(FLEX_SCALES)
    return values


class FlexingPass(QAPass):
    """Advisory: never gates the overall verdict."""

    @property
    def name(self) -> str:
        return "flexing"

    @property
    def description(self) -> str:
        return "Substitute test values into dependent formulas; constraint references non-null."

    def check(self, sir: SIR, code: str | None, findings: Findings) -> None:
        params = sir.family_parameters
        known = {p.name for p in params}
        scenarios = 0

        for flexed in params:
            if flexed.param_type not in FLEXED_TYPES:
                continue
            dependents = [
                p for p in params
                if p.formula and p.name != flexed.name and flexed.name in references(p.formula)
            ]
            values = flex_values(flexed)
            scenarios += len(values)
            # One finding per dependent formula, at the first failing value.
            for dependent in dependents:
                for value in values:
                    expression = substitute(dependent.formula, flexed.name, value)
                    problems = formula_problems(expression, known)
                    if problems:
                        findings.issue(
                            "flexing.scenario_failed",
                            f"Flexing scenario failed: {dependent.name} with "
                            f"{flexed.name}={value}: {problems[0]}",
                        )
                        break
        findings.result.details["scenarios"] = scenarios

        for index, constraint in enumerate(sir.constraints):
            if not constraint.element1 or not constraint.element2:
                findings.issue(
                    "flexing.constraint_missing",
                    f"Constraint {index} has missing elements",
                )
