"""QA passes — geometry, parameters, performance, compliance, flexing, metadata."""

from famai.validation.passes.base import Findings, QAPass
from famai.validation.passes.compliance import CompliancePass
from famai.validation.passes.flexing import FlexingPass
from famai.validation.passes.geometry import GeometryPass
from famai.validation.passes.metadata import MetadataPass
from famai.validation.passes.parameters import ParametersPass
from famai.validation.passes.performance import PerformancePass


def default_passes() -> list[QAPass]:
    """The six built-in passes in reporting order."""
    return [
        GeometryPass(),
        ParametersPass(),
        PerformancePass(),
        CompliancePass(),
        FlexingPass(),
        MetadataPass(),
    ]


__all__ = [
    "CompliancePass",
    "Findings",
    "FlexingPass",
    "GeometryPass",
    "MetadataPass",
    "ParametersPass",
    "PerformancePass",
    "QAPass",
    "default_passes",
]
