"""QA Gateway — scored validation passes that gate code emission and execution."""

from famai.validation.gateway import QAGateway
from famai.validation.passes import QAPass
from famai.validation.result import (
    QAResult,
    Recommendation,
    ValidationResult,
    improvement_score,
)

__all__ = [
    "QAGateway",
    "QAPass",
    "QAResult",
    "Recommendation",
    "ValidationResult",
    "improvement_score",
]
