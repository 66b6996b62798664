"""QA result models and QA.md report generation."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ValidationResult(BaseModel):
    """Outcome of one QA pass.

    ``passed`` is False as soon as the pass records an issue; warnings
    only lower the score.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    passed: bool = Field(default=True, alias="pass")
    score: int = 100
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    critical: bool = False
    details: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Recommendation(BaseModel):
    """Suggested fixes for the issues or warnings of one pass."""

    pass_name: str
    priority: str
    """'high' for issues, 'medium' for warnings."""

    findings: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class QAResult(BaseModel):
    """Aggregate result of every QA pass over one SIR."""

    family_name: str = ""
    category: str = ""
    lod_level: Optional[int] = None
    validations: dict[str, ValidationResult] = Field(default_factory=dict)
    overall_pass: bool = False
    recommendations: list[Recommendation] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def overall_score(self) -> float:
        """Mean score over all passes."""
        if not self.validations:
            return 0.0
        return sum(v.score for v in self.validations.values()) / len(self.validations)

    @property
    def issue_count(self) -> int:
        return sum(len(v.issues) for v in self.validations.values())

    @property
    def warning_count(self) -> int:
        return sum(len(v.warnings) for v in self.validations.values())

    def failed_passes(self) -> list[str]:
        return [name for name, v in self.validations.items() if not v.passed]

    def summary(self) -> str:
        status = "READY" if self.overall_pass else "NOT READY"
        return (
            f"{status}: score {self.overall_score:.1f}/100, "
            f"{self.issue_count} issues, {self.warning_count} warnings"
        )

    def to_markdown(self) -> str:
        """Generate QA.md content."""
        lines: list[str] = []

        lines.append(f"# QA Report: {self.family_name or 'Unnamed family'}")
        lines.append("")
        lines.append(f"**Category:** {self.category or 'n/a'}")
        lines.append(f"**LOD:** {self.lod_level if self.lod_level is not None else 'n/a'}")
        lines.append(f"**Status:** {'PASS' if self.overall_pass else 'FAIL'}")
        lines.append(f"**Score:** {self.overall_score:.1f}")
        lines.append(f"**Validated:** {self.timestamp.strftime('%Y-%m-%d %H:%M UTC')}")
        lines.append("")

        lines.append("## Passes")
        lines.append("")
        lines.append("| Pass | Result | Score | Issues | Warnings |")
        lines.append("|------|--------|-------|--------|----------|")
        for name, result in self.validations.items():
            label = f"{name} (critical)" if result.critical else name
            outcome = "pass" if result.passed else "FAIL"
            lines.append(
                f"| {label} | {outcome} | {result.score} | {len(result.issues)} | {len(result.warnings)} |"
            )
        lines.append("")

        findings = [(n, r) for n, r in self.validations.items() if r.issues or r.warnings]
        if findings:
            lines.append("## Findings")
            lines.append("")
            for name, result in findings:
                for issue in result.issues:
                    lines.append(f"- **{name}** ERROR: {issue}")
                for warning in result.warnings:
                    lines.append(f"- **{name}** WARNING: {warning}")
            lines.append("")

        if self.recommendations:
            lines.append("## Recommendations")
            lines.append("")
            for rec in self.recommendations:
                for suggestion in rec.suggestions:
                    lines.append(f"- [{rec.priority}] {rec.pass_name}: {suggestion}")
            lines.append("")

        if not findings:
            lines.append("No issues found. Family passes all QA checks.")
            lines.append("")

        return "\n".join(lines)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def to_dict(self) -> dict[str, Any]:
        return {
            "family_name": self.family_name,
            "category": self.category,
            "lod_level": self.lod_level,
            "overall_pass": self.overall_pass,
            "overall_score": round(self.overall_score, 2),
            "timestamp": self.timestamp.isoformat(),
            "validations": {name: v.to_dict() for name, v in self.validations.items()},
            "recommendations": [r.model_dump() for r in self.recommendations],
        }


def improvement_score(previous: QAResult, current: QAResult) -> float:
    """Change in overall score from *previous* to *current* (positive is better)."""
    return current.overall_score - previous.overall_score
