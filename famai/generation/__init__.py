"""Code Emitter — translate a SIR into a family-creation script."""

from famai.generation.artifact import CodeMetadata, GeneratedCode
from famai.generation.emitter import CodeEmitter, complexity_score, estimate_execution_time

__all__ = [
    "CodeEmitter",
    "CodeMetadata",
    "GeneratedCode",
    "complexity_score",
    "estimate_execution_time",
]
