"""Shared domain types and the sign engine (signbridge.core.engine)."""
from .types import Candidate, GeometricMatch, Resolution, Detection, HistoryEntry, LearnerStat

__all__ = [
    "Candidate",
    "GeometricMatch",
    "Resolution",
    "Detection",
    "HistoryEntry",
    "LearnerStat",
]
