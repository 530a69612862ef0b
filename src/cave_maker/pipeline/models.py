"""Data models shared by the step loop and the run logger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

TickPhase = Literal["restart", "step", "cull", "accepted", "rejected", "idle"]


@dataclass
class TickResult:
    """Outcome of a single step-loop tick."""

    phase: TickPhase
    attempt: int
    generation: int
    passage_area: int
    cavern_count: int
    duration_ns: int = 0
    largest_cavern: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "attempt": self.attempt,
            "generation": self.generation,
            "passage_area": self.passage_area,
            "cavern_count": self.cavern_count,
            "duration_ns": self.duration_ns,
            "largest_cavern": self.largest_cavern,
            "metadata": self.metadata,
        }


@dataclass
class RunSummary:
    """Aggregate of a finished run."""

    attempts: int
    ticks: int
    generations: int
    passage_area: int
    cavern_count: int
    accepted: bool
    duration_ns: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempts": self.attempts,
            "ticks": self.ticks,
            "generations": self.generations,
            "passage_area": self.passage_area,
            "cavern_count": self.cavern_count,
            "accepted": self.accepted,
            "duration_ns": self.duration_ns,
        }


__all__ = ["RunSummary", "TickPhase", "TickResult"]
