"""Abstract QAPass interface."""

from __future__ import annotations

import abc
import logging
from typing import Mapping

from famai.sir.schema import SIR
from famai.validation.result import ValidationResult

logger = logging.getLogger(__name__)


class Findings:
    """Collects issues and warnings for one pass and deducts their points.

    Deduction amounts come from a table keyed ``"<pass>.<defect>"``; unknown
    keys deduct nothing.  The score floors at 0.
    """

    def __init__(self, result: ValidationResult, deductions: Mapping[str, int]) -> None:
        self.result = result
        self._deductions = deductions

    def _deduct(self, key: str) -> None:
        self.result.score = max(0, self.result.score - self._deductions.get(key, 0))

    def issue(self, key: str, message: str) -> None:
        self.result.issues.append(message)
        self.result.passed = False
        self._deduct(key)

    def warning(self, key: str, message: str) -> None:
        self.result.warnings.append(message)
        self._deduct(key)


class QAPass(abc.ABC):
    """Base class for all QA passes.

    Subclasses implement :meth:`check`; :meth:`run` wraps it into a scored
    :class:`ValidationResult`.  A pass marked ``critical`` gates the
    overall QA verdict.
    """

    critical: bool = False

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short pass identifier."""

    @property
    @abc.abstractmethod
    def description(self) -> str:
        """Human-readable description."""

    @abc.abstractmethod
    def check(self, sir: SIR, code: str | None, findings: Findings) -> None:
        """Inspect *sir* (and the emitted *code*, when given), recording findings."""

    def run(self, sir: SIR, code: str | None, deductions: Mapping[str, int]) -> ValidationResult:
        result = ValidationResult(name=self.name, critical=self.critical)
        try:
            self.check(sir, code, Findings(result, deductions))
        except Exception as exc:
            logger.debug("Pass %s failed", self.name, exc_info=True)
            result.issues.append(f"{self.name.capitalize()} validation error: {exc}")
            result.passed = False
            result.score = 0
        return result
