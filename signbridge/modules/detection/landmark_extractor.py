"""
21-point hand landmark validation and geometric helpers.
Provides the shared measurements used by the geometric classifier,
the conflict resolver and the curl/direction gesture bank.

Landmarks are (x, y, z) with x/y normalized to the frame (y grows
downward) and z as relative depth.
"""

import math
import logging
from typing import Optional
import numpy as np

logger = logging.getLogger(__name__)

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC = 1
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_DIP = 7
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_DIP = 11
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_DIP = 15
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_DIP = 19
PINKY_TIP = 20

NUM_LANDMARKS = 21

FINGERS = ("thumb", "index", "middle", "ring", "pinky")
FINGER_TIPS = [THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP]

# Finger joint chains: (CMC/MCP, MCP/PIP, IP/DIP, TIP)
FINGER_JOINTS = {
    "thumb":  (THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP),
    "index":  (INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP),
    "middle": (MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP),
    "ring":   (RING_MCP, RING_PIP, RING_DIP, RING_TIP),
    "pinky":  (PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP),
}

# (tip, base knuckle) pairs for the reach-based extension test
EXTENSION_POINTS = {
    "thumb":  (THUMB_TIP, THUMB_MCP),
    "index":  (INDEX_TIP, INDEX_MCP),
    "middle": (MIDDLE_TIP, MIDDLE_MCP),
    "ring":   (RING_TIP, RING_MCP),
    "pinky":  (PINKY_TIP, PINKY_MCP),
}

# Tip reach must exceed knuckle reach by this factor. Fingers have different
# natural length-to-reach ratios, hence per-finger values.
DEFAULT_EXTENSION_THRESHOLDS = {
    "thumb": 1.30,
    "index": 1.60,
    "middle": 1.60,
    "ring": 1.55,
    "pinky": 1.45,
}

_MIN_HAND_SCALE = 0.01


def as_hand(landmarks) -> Optional[np.ndarray]:
    """Coerce landmarks into a (21, 3) float array.

    Accepts a numpy array, a sequence of 21 (x, y, z) triples, a sequence
    of objects exposing .x/.y/.z, or a MediaPipe hand result exposing
    .landmark. Partial or malformed hands are rejected.

    Returns:
        np.ndarray of shape (21, 3), or None when the input is not a
        complete hand.
    """
    if landmarks is None:
        return None

    points = getattr(landmarks, "landmark", landmarks)

    if not isinstance(points, np.ndarray):
        try:
            points = list(points)
        except TypeError:
            return None
        if len(points) != NUM_LANDMARKS:
            return None
        if all(hasattr(p, "x") and hasattr(p, "y") for p in points):
            points = [(p.x, p.y, getattr(p, "z", 0.0)) for p in points]

    try:
        hand = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError):
        return None

    if hand.shape != (NUM_LANDMARKS, 3):
        return None
    if not np.all(np.isfinite(hand)):
        return None
    return hand


def to_pixel_coords(hand: np.ndarray, width: float, height: float) -> np.ndarray:
    """Project normalized landmarks into pixel space.

    Depth is scaled by the frame width, matching the convention of the
    curl/direction gesture bank.

    Returns:
        np.ndarray of shape (21, 3)
    """
    pixels = np.array(hand, dtype=np.float64, copy=True)
    pixels[:, 0] *= width
    pixels[:, 1] *= height
    pixels[:, 2] *= width
    return pixels


# =========================================================================
# Math Helpers
# =========================================================================

def distance(p1: np.ndarray, p2: np.ndarray) -> float:
    """Euclidean distance between two 3D points."""
    return float(np.linalg.norm(p1 - p2))


def angle_at(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    """Angle at point b formed by points a-b-c, in degrees.

    Degenerate rays (zero length) yield 0.
    """
    ba = a - b
    bc = c - b
    mag = np.linalg.norm(ba) * np.linalg.norm(bc)
    if mag < 1e-8:
        return 0.0
    cos_angle = np.clip(np.dot(ba, bc) / mag, -1.0, 1.0)
    return math.degrees(math.acos(cos_angle))


def hand_scale(hand: np.ndarray) -> float:
    """Wrist to middle-finger knuckle distance, floored for near-camera hands."""
    return max(_MIN_HAND_SCALE, distance(hand[WRIST], hand[MIDDLE_MCP]))


def is_extended(hand: np.ndarray, finger: str, threshold: float) -> bool:
    """Tip-to-wrist reach exceeds knuckle-to-wrist reach times threshold."""
    tip, base = EXTENSION_POINTS[finger]
    tip_reach = distance(hand[WRIST], hand[tip])
    base_reach = distance(hand[WRIST], hand[base])
    return tip_reach > base_reach * threshold


def finger_states(hand: np.ndarray, thresholds: dict = None) -> dict:
    """Extension state for all five fingers.

    Returns:
        dict with finger names -> bool (True = extended)
    """
    thresholds = thresholds or DEFAULT_EXTENSION_THRESHOLDS
    return {
        finger: is_extended(
            hand, finger, thresholds.get(finger, DEFAULT_EXTENSION_THRESHOLDS[finger])
        )
        for finger in FINGERS
    }


def is_horizontal(hand: np.ndarray, start: int, end: int, ratio: float) -> bool:
    """True when the start->end vector is wider than tall by the given ratio."""
    dx = hand[end][0] - hand[start][0]
    dy = hand[end][1] - hand[start][1]
    return abs(dx) > abs(dy) * ratio
