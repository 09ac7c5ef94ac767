"""
Shared domain types for the SignBridge fusion core.

Centralizes the value objects passed between the recognition layers
so that modules never import each other just for a container class.
"""

from dataclasses import dataclass


# =============================================================================
# Per-frame opinions
# =============================================================================

@dataclass(frozen=True)
class Candidate:
    """A named, scored opinion from the curl/direction gesture bank (0-10)."""
    name: str
    score: float


@dataclass(frozen=True)
class GeometricMatch:
    """Output of the geometric classifier; confidence is in [0, 1]."""
    name: str
    confidence: float


@dataclass(frozen=True)
class Resolution:
    """The single best {name, score} chosen for one frame (score 0-10)."""
    name: str
    score: float


@dataclass(frozen=True)
class Detection:
    """Smoothed engine output handed to the host."""
    name: str
    confidence_percent: int

    def __repr__(self):
        return f"Detection({self.name}, {self.confidence_percent}%)"


# =============================================================================
# Session state
# =============================================================================

@dataclass(frozen=True)
class HistoryEntry:
    """One per-frame label in the smoothing window."""
    name: str
    confidence: float


@dataclass
class LearnerStat:
    """Per-sign running statistics for the online learner."""
    ema: float
    count: int = 0

    def to_dict(self) -> dict:
        return {"ema": self.ema, "count": self.count}
