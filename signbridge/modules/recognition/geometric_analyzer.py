"""
Rule-based geometric sign classifier.

Pure landmark math (reach ratios, joint angles, fingertip spreads)
running in parallel to the curl/direction gesture bank. It only
answers for poses that are geometrically unambiguous; everything
else returns None so the caller defers to the bank.
"""

import logging
from typing import Optional

from signbridge.core.types import GeometricMatch
from signbridge.modules.detection.landmark_extractor import (
    as_hand, angle_at, distance, finger_states, hand_scale, is_horizontal,
    DEFAULT_EXTENSION_THRESHOLDS,
    THUMB_MCP, THUMB_IP, THUMB_TIP, INDEX_MCP, INDEX_TIP,
    MIDDLE_MCP, MIDDLE_TIP, PINKY_MCP, PINKY_TIP,
)

logger = logging.getLogger(__name__)

# Branch confidences. Empirical reliability of each pose, not computed.
CONFIDENCES = {
    "THUMBS UP": 0.95,
    "THUMBS DOWN": 0.95,
    "L": 0.90,
    "I LOVE YOU": 0.92,
    "CALL ME": 0.85,
    "Y": 0.88,
    "STOP": 0.85,
    "HELLO": 0.80,
    "D": 0.84,
    "D_LOOSE": 0.72,
    "W": 0.86,
    "V": 0.88,
    "U": 0.84,
    "OK": 0.86,
    "EAT": 0.70,
}

_L_MIN_ANGLE = 58.0
_PINKY_HORIZONTAL_RATIO = 1.4
_OPEN_SPREAD = 1.2
_INDEX_UP_OFFSET = -0.05
_D_THUMB_TO_MIDDLE = 0.6
_V_SPREAD = 0.70
_OK_PINCH = 0.40
_EAT_THUMB_RISE = -0.05


class GeometricAnalyzer:
    """Classifies geometrically distinctive signs from raw landmarks.

    Stateless: identical input always yields identical output.
    """

    def __init__(self, config: dict = None):
        """Initialize the analyzer.

        Args:
            config: Optional geometry config section. Recognized keys:
                    extension_thresholds (per-finger reach factors) and
                    confidences (per-branch overrides).
        """
        config = config or {}
        self._thresholds = dict(DEFAULT_EXTENSION_THRESHOLDS)
        self._thresholds.update(config.get("extension_thresholds") or {})
        self._confidences = dict(CONFIDENCES)
        self._confidences.update(config.get("confidences") or {})

    @property
    def thresholds(self) -> dict:
        return dict(self._thresholds)

    def finger_states(self, hand) -> Optional[dict]:
        """Per-finger extension flags, or None for a malformed hand."""
        lm = as_hand(hand)
        if lm is None:
            return None
        return finger_states(lm, self._thresholds)

    def classify(self, hand) -> Optional[GeometricMatch]:
        """Classify from landmarks alone.

        Branches are checked in a fixed order and the first match wins.

        Returns:
            GeometricMatch, or None to defer to the gesture bank.
        """
        lm = as_hand(hand)
        if lm is None:
            return None

        fs = finger_states(lm, self._thresholds)
        scale = hand_scale(lm)
        thumb, index, middle, ring, pinky = (
            fs["thumb"], fs["index"], fs["middle"], fs["ring"], fs["pinky"]
        )
        ext_count = sum(fs.values())

        # --- THUMBS UP / DOWN ---
        if thumb and not (index or middle or ring or pinky):
            if lm[THUMB_TIP][1] < lm[INDEX_MCP][1]:
                return self._match("THUMBS UP")
            if lm[THUMB_TIP][1] > lm[MIDDLE_MCP][1]:
                return self._match("THUMBS DOWN")

        # --- L (thumb + index, opened wide) ---
        if thumb and index and not (middle or ring or pinky):
            opening = angle_at(lm[THUMB_TIP], lm[THUMB_MCP], lm[INDEX_MCP])
            if opening > _L_MIN_ANGLE:
                return self._match("L")

        # --- I LOVE YOU ---
        if thumb and index and pinky and not (middle or ring):
            return self._match("I LOVE YOU")

        # --- CALL ME vs Y (thumb + pinky) ---
        if thumb and pinky and not (index or middle or ring):
            if is_horizontal(lm, PINKY_MCP, PINKY_TIP, _PINKY_HORIZONTAL_RATIO):
                return self._match("CALL ME")
            return self._match("Y")

        # --- STOP vs HELLO (all five) ---
        if ext_count == 5:
            spread = distance(lm[INDEX_TIP], lm[PINKY_TIP]) / scale
            index_up = (lm[INDEX_TIP][1] - lm[INDEX_MCP][1]) < _INDEX_UP_OFFSET
            if index_up:
                return self._match("STOP" if spread > _OPEN_SPREAD else "HELLO")

        # --- D (index only, others curl toward thumb) ---
        if index and not (thumb or middle or ring or pinky):
            thumb_to_middle = distance(lm[THUMB_TIP], lm[MIDDLE_TIP]) / scale
            if thumb_to_middle < _D_THUMB_TO_MIDDLE:
                return self._match("D")
            return GeometricMatch("D", self._confidences["D_LOOSE"])

        # --- W (three-finger fan) ---
        if index and middle and ring and not (thumb or pinky):
            return self._match("W")

        # --- V vs U ---
        if index and middle and not (thumb or ring or pinky):
            spread = distance(lm[INDEX_TIP], lm[MIDDLE_TIP]) / scale
            return self._match("V" if spread > _V_SPREAD else "U")

        # --- OK (thumb-index pinch, three up) ---
        if ext_count == 3 and middle and ring and pinky:
            pinch = distance(lm[THUMB_TIP], lm[INDEX_TIP]) / scale
            if pinch < _OK_PINCH:
                return self._match("OK")

        # --- EAT (fully curled, thumb rising) ---
        if ext_count == 0:
            thumb_rise = lm[THUMB_TIP][1] - lm[THUMB_IP][1]
            if thumb_rise < _EAT_THUMB_RISE:
                return self._match("EAT")

        return None

    def _match(self, name: str) -> GeometricMatch:
        return GeometricMatch(name, self._confidences[name])
