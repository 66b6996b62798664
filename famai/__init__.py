"""famai — natural-language to parametric family pipeline."""

__version__ = "0.1.0"

from famai.generation.emitter import CodeEmitter
from famai.generation.artifact import GeneratedCode
from famai.jobs.record import JobRecord, JobStatusReport
from famai.jobs.states import JobStatus
from famai.jobs.tracker import JobTracker
from famai.nlp.generator import GenerationResult, SIRGenerator
from famai.nlp.heuristic import HeuristicExtractor
from famai.pipeline import DesignResult, FamilyPipeline
from famai.session import Session
from famai.sir.schema import SIR
from famai.store import InMemoryStore, Store
from famai.validation.gateway import QAGateway
from famai.validation.result import QAResult, ValidationResult

__all__ = [
    "__version__",
    # Facade
    "FamilyPipeline",
    "DesignResult",
    # Components
    "CodeEmitter",
    "GeneratedCode",
    "GenerationResult",
    "HeuristicExtractor",
    "JobRecord",
    "JobStatus",
    "JobStatusReport",
    "JobTracker",
    "QAGateway",
    "QAResult",
    "SIR",
    "SIRGenerator",
    "Session",
    "ValidationResult",
    # Storage
    "InMemoryStore",
    "Store",
]
