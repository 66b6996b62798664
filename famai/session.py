"""Design sessions: the current SIR, its version, and a bounded turn history."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from famai.config import MAX_HISTORY_TURNS
from famai.generation.artifact import GeneratedCode
from famai.sir.schema import SIR
from famai.validation.result import QAResult


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationTurn(BaseModel):
    """One prompt/SIR exchange within a session."""

    timestamp: datetime = Field(default_factory=_utc_now)
    prompt: str
    sir: SIR
    kind: str = "generation"
    """Kind: 'generation', 'refinement' or 'variation'."""

    source: str = "heuristic"

    def to_context(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "userPrompt": self.prompt,
            "type": self.kind,
            "sir": self.sir.to_dict(),
        }


class Session(BaseModel):
    """State owned by one design session.

    A session holds at most one current SIR.  Refinements supersede it and
    bump :attr:`version`; the last :data:`MAX_HISTORY_TURNS` turns are kept,
    oldest evicted first.
    """

    session_id: str
    current_sir: Optional[SIR] = None
    source: Optional[str] = None
    version: int = 0
    history: list[ConversationTurn] = Field(default_factory=list)
    code: Optional[GeneratedCode] = None
    last_qa: Optional[QAResult] = None
    job_ids: list[str] = Field(default_factory=list)
    status: str = "active"
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    def add_turn(self, turn: ConversationTurn) -> None:
        self.history.append(turn)
        if len(self.history) > MAX_HISTORY_TURNS:
            del self.history[: len(self.history) - MAX_HISTORY_TURNS]
        self.updated_at = turn.timestamp

    def supersede(self, sir: SIR, source: str) -> int:
        """Make *sir* the current design and return the new version."""
        self.current_sir = sir
        self.source = source
        self.version += 1
        self.code = None
        self.last_qa = None
        return self.version
