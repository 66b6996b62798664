"""Natural-language front end — convert component descriptions to SIRs."""

from famai.nlp.generator import GenerationResult, SIRGenerator, scale_variation
from famai.nlp.heuristic import DesignValues, ExtractionReport, HeuristicExtractor

__all__ = [
    "DesignValues",
    "ExtractionReport",
    "GenerationResult",
    "HeuristicExtractor",
    "SIRGenerator",
    "scale_variation",
]
