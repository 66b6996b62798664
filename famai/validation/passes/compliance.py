"""Compliance pass — extension point for standards checks.

The base design ships three named checks (BIM execution plan, industry
standards, category rules) that find nothing, so the pass always
succeeds.  Register real checks with :meth:`CompliancePass.add_check`; a
check takes the SIR and returns a list of issue messages.
"""

from __future__ import annotations

from typing import Callable

from famai.sir.schema import SIR
from famai.validation.passes.base import Findings, QAPass

ComplianceCheck = Callable[[SIR], list[str]]


def bim_execution_plan(sir: SIR) -> list[str]:
    return []


def industry_standards(sir: SIR) -> list[str]:
    return []


def category_rules(sir: SIR) -> list[str]:
    return []


class CompliancePass(QAPass):

    def __init__(self, checks: dict[str, ComplianceCheck] | None = None) -> None:
        self.checks: dict[str, ComplianceCheck] = checks if checks is not None else {
            "bim_execution_plan": bim_execution_plan,
            "industry_standards": industry_standards,
            "category_rules": category_rules,
        }

    @property
    def name(self) -> str:
        return "compliance"

    @property
    def description(self) -> str:
        return "Standards-body and category compliance (placeholder checks by default)."

    def add_check(self, name: str, check: ComplianceCheck) -> None:
        self.checks[name] = check

    def check(self, sir: SIR, code: str | None, findings: Findings) -> None:
        findings.result.details["checks"] = list(self.checks)
        for name, check in self.checks.items():
            for message in check(sir):
                findings.issue(f"compliance.{name}", message)
