"""Sign recognition: gesture bank, geometry, conflict resolution, smoothing."""
from .geometric_analyzer import GeometricAnalyzer
from .conflict_resolver import ConflictResolver
from .temporal_smoother import TemporalSmoother
from .gesture_bank import GestureEstimator, GestureDescription, load_gesture_registry

__all__ = [
    "GeometricAnalyzer",
    "ConflictResolver",
    "TemporalSmoother",
    "GestureEstimator",
    "GestureDescription",
    "load_gesture_registry",
]
