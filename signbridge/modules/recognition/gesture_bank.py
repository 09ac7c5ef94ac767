"""
Curl/direction gesture bank.

Each finger of a hand is summarized by two discrete features: how far it
curls (from the angle at its middle joint) and where it points (from its
base-to-tip vector, quantized to 8 compass sectors). A sign description
lists the expected curl and direction per finger with weights; the
estimator scores a hand against every description on a 0-10 scale.

Descriptions are immutable data loaded once from gestures.yaml.
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional

import numpy as np
import yaml

from signbridge.core.types import Candidate
from signbridge.modules.detection.landmark_extractor import (
    as_hand, angle_at, FINGERS, FINGER_JOINTS,
)
from signbridge.modules.utils.config import DEFAULT_GESTURES_PATH

logger = logging.getLogger(__name__)

MAX_SCORE = 10.0

# Joint angle (degrees) above which a finger counts as straight / half bent
_NO_CURL_ANGLE = 130.0
_HALF_CURL_ANGLE = 60.0


class FingerCurl(Enum):
    NO_CURL = "no_curl"
    HALF_CURL = "half_curl"
    FULL_CURL = "full_curl"


class FingerDirection(Enum):
    """Pointing direction in image space (up = toward the top of the frame)."""
    HORIZONTAL_RIGHT = "horizontal_right"
    DIAGONAL_UP_RIGHT = "diagonal_up_right"
    VERTICAL_UP = "vertical_up"
    DIAGONAL_UP_LEFT = "diagonal_up_left"
    HORIZONTAL_LEFT = "horizontal_left"
    DIAGONAL_DOWN_LEFT = "diagonal_down_left"
    VERTICAL_DOWN = "vertical_down"
    DIAGONAL_DOWN_RIGHT = "diagonal_down_right"


# Counter-clockwise from 0 degrees (pointing right), 45 degrees per sector
_DIRECTION_SECTORS = list(FingerDirection)


@dataclass(frozen=True)
class GestureDescription:
    """Expected per-finger curls and directions for one sign."""
    name: str
    description: str
    curls: Mapping[str, Mapping[FingerCurl, float]]
    directions: Mapping[str, Mapping[FingerDirection, float]]
    category: str = ""

    @property
    def parameter_count(self) -> int:
        return len(self.curls) + len(self.directions)


# =========================================================================
# Registry loading
# =========================================================================

def _parse_expectations(sign: str, kind: str, section, enum_cls) -> Mapping:
    if section is None:
        return MappingProxyType({})
    if not isinstance(section, dict):
        raise ValueError(f"Gesture '{sign}': '{kind}' must be a mapping")

    parsed = {}
    for finger, weights in section.items():
        if finger not in FINGERS:
            raise ValueError(f"Gesture '{sign}': unknown finger '{finger}' in {kind}")
        if not isinstance(weights, dict) or not weights:
            raise ValueError(f"Gesture '{sign}': {kind}.{finger} must be a non-empty mapping")
        entry = {}
        for key, weight in weights.items():
            try:
                value = enum_cls(key)
            except ValueError:
                raise ValueError(
                    f"Gesture '{sign}': unknown {kind} '{key}' for {finger}"
                ) from None
            if isinstance(weight, bool) or not isinstance(weight, (int, float)):
                raise ValueError(f"Gesture '{sign}': weight for {finger}/{key} must be a number")
            entry[value] = float(weight)
        parsed[finger] = MappingProxyType(entry)
    return MappingProxyType(parsed)


def build_gesture_registry(static_gestures: dict) -> Mapping[str, GestureDescription]:
    """Validate raw sign definitions and freeze them into a registry.

    Args:
        static_gestures: {name: {description, category, curl, direction}}

    Returns:
        Read-only mapping of sign name -> GestureDescription

    Raises:
        ValueError: on unknown finger, curl or direction names
    """
    if not isinstance(static_gestures, dict) or not static_gestures:
        raise ValueError("No static gestures defined")

    registry = {}
    for name, definition in static_gestures.items():
        name = str(name)
        definition = definition or {}
        registry[name] = GestureDescription(
            name=name,
            description=definition.get("description", ""),
            curls=_parse_expectations(name, "curl", definition.get("curl"), FingerCurl),
            directions=_parse_expectations(name, "direction", definition.get("direction"), FingerDirection),
            category=definition.get("category", ""),
        )
    return MappingProxyType(registry)


def load_gesture_registry(path: Optional[str] = None) -> Mapping[str, GestureDescription]:
    """Load the static_gestures section of a gesture YAML file.

    Args:
        path: YAML file (defaults to the packaged gestures.yaml)
    """
    path = path or DEFAULT_GESTURES_PATH
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    registry = build_gesture_registry(data.get("static_gestures"))
    logger.info("Loaded %d gesture descriptions from %s", len(registry), path)
    return registry


# =========================================================================
# Per-finger features
# =========================================================================

def estimate_curl(keypoints: np.ndarray, finger: str) -> FingerCurl:
    """Curl from the angle at the finger's middle joint.

    Fingers bend at the PIP (MCP-PIP-TIP); the thumb at the IP (MCP-IP-TIP).
    """
    base, pip, dip, tip = FINGER_JOINTS[finger]
    if finger == "thumb":
        start, mid = pip, dip
    else:
        start, mid = base, pip
    angle = angle_at(keypoints[start], keypoints[mid], keypoints[tip])
    if angle > _NO_CURL_ANGLE:
        return FingerCurl.NO_CURL
    if angle > _HALF_CURL_ANGLE:
        return FingerCurl.HALF_CURL
    return FingerCurl.FULL_CURL


def estimate_direction(keypoints: np.ndarray, finger: str) -> FingerDirection:
    """Base-to-tip pointing direction, quantized to 45 degree sectors."""
    joints = FINGER_JOINTS[finger]
    # Thumb measured from its MCP, other fingers from their knuckle
    base = joints[1] if finger == "thumb" else joints[0]
    tip = joints[3]
    dx = keypoints[tip][0] - keypoints[base][0]
    dy = keypoints[tip][1] - keypoints[base][1]
    # Image y grows downward
    angle = math.degrees(math.atan2(-dy, dx))
    sector = int(math.floor(angle / 45.0 + 0.5)) % 8
    return _DIRECTION_SECTORS[sector]


def finger_pose(keypoints) -> dict:
    """Curl and direction for all five fingers.

    Returns:
        dict finger name -> (FingerCurl, FingerDirection)
    """
    kp = as_hand(keypoints)
    if kp is None:
        raise ValueError("Keypoints must be 21 finite (x, y, z) points")
    return {
        finger: (estimate_curl(kp, finger), estimate_direction(kp, finger))
        for finger in FINGERS
    }


# =========================================================================
# Estimator
# =========================================================================

class GestureEstimator:
    """Scores a hand against every registered sign description."""

    def __init__(self, registry: Mapping[str, GestureDescription]):
        self._registry = registry

    @classmethod
    def from_yaml(cls, path: Optional[str] = None) -> "GestureEstimator":
        return cls(load_gesture_registry(path))

    @property
    def registry(self) -> Mapping[str, GestureDescription]:
        return self._registry

    def estimate(self, keypoints, min_score: float) -> List[Candidate]:
        """Rank all signs for one hand.

        Args:
            keypoints: 21 (x, y, z) points, normally in pixel space
            min_score: Candidates below this score (0-10) are dropped

        Returns:
            Candidates sorted by descending score

        Raises:
            ValueError: if keypoints are not a complete hand
        """
        pose = finger_pose(keypoints)

        candidates = []
        for name, gesture in self._registry.items():
            score = self._score(gesture, pose)
            if score >= min_score:
                candidates.append(Candidate(name, score))

        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates

    @staticmethod
    def _score(gesture: GestureDescription, pose: dict) -> float:
        """10 x mean of the matched weight per expectation (0 when unmatched)."""
        total_params = gesture.parameter_count
        if total_params == 0:
            return 0.0

        matched = 0.0
        for finger, weights in gesture.curls.items():
            matched += weights.get(pose[finger][0], 0.0)
        for finger, weights in gesture.directions.items():
            matched += weights.get(pose[finger][1], 0.0)
        return MAX_SCORE * matched / total_params
