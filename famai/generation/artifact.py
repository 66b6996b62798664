"""GeneratedCode model — the emitted script and its execution metadata."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class CodeMetadata(BaseModel):
    family_name: str
    category: str
    lod_level: Optional[int] = None
    code_length: int = 0
    estimated_execution_time: int = 0
    """Seconds."""

    complexity_score: int = 0
    optimizations: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GeneratedCode(BaseModel):
    """Output of :meth:`famai.generation.CodeEmitter.emit`.

    ``sections`` holds each section as written, before optimization;
    ``code`` is the optimized script.
    """

    code: str
    metadata: CodeMetadata
    sections: dict[str, str] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
