"""
Sign-pair disambiguation between the gesture bank and landmark geometry.

The curl/direction bank confuses signs that share a finger shape
(A/S, U/R, C/O/EAT/HOT, ...). The resolver merges the bank's ranked
candidates with the geometric classifier's opinion and applies one
rule set per conflicting cluster, keyed on the bank's top name.

Scores pass through unchanged unless geometry strongly agrees (boost)
or strongly disagrees (override).
"""

import logging
from typing import Optional, Sequence

from signbridge.core.types import Candidate, Resolution
from signbridge.modules.detection.landmark_extractor import (
    as_hand, distance, hand_scale, is_horizontal,
    WRIST, THUMB_IP, THUMB_TIP, INDEX_MCP, INDEX_PIP, INDEX_TIP,
    MIDDLE_MCP, MIDDLE_TIP, RING_TIP, PINKY_MCP, PINKY_TIP,
)
from signbridge.modules.recognition.geometric_analyzer import GeometricAnalyzer

logger = logging.getLogger(__name__)

MAX_SCORE = 10.0

# Rule thresholds (normalized image units unless noted "/ scale")
_THUMB_ACROSS_PALM = 0.13
_PEACE_THUMB_REACH = 1.18       # / scale
_OK_PINCH = 0.36                # / scale
_THANKS_MIDDLE_DX = 0.08
_BAD_MIDDLE_DY = 0.06
_O_TIP_SPREAD = 0.28            # / scale
_EAT_MIDDLE_DY = -0.06
_HOT_MIDDLE_DY = 0.08
_CALL_ME_HORIZONTAL_RATIO = 1.3
_DRINK_THUMB_VERTICAL_RATIO = 1.4
_SLOW_SPREAD = 0.9              # / scale

FIST_LETTERS = ("M", "N", "S", "T")
ARC_SIGNS = ("C", "O", "EAT", "HOT", "DRINK")


class ConflictResolver:
    """Resolves the bank's top candidate against landmark geometry."""

    def __init__(self, analyzer: GeometricAnalyzer = None, config: dict = None):
        """Initialize the resolver.

        Args:
            analyzer: Geometric classifier to consult (a default one is
                      built when omitted).
            config: Optional resolver config section with keys
                    agreement_boost, agreement_min_confidence and
                    override_min_confidence.
        """
        config = config or {}
        self._analyzer = analyzer or GeometricAnalyzer()
        self._boost = config.get("agreement_boost", 1.12)
        self._agree_min = config.get("agreement_min_confidence", 0.80)
        self._override_min = config.get("override_min_confidence", 0.87)

        self._rules = (
            (("A", "S"), self._a_vs_s),
            (FIST_LETTERS, self._folded_fist),
            (("U", "R"), self._u_vs_r),
            (("V", "PEACE"), self._v_vs_peace),
            (("F", "OK"), self._f_vs_ok),
            (("GOOD", "THANKS"), self._good_vs_thanks),
            (("BAD", "PLEASE", "WAIT"), self._flat_hand_direction),
            (ARC_SIGNS, self._arc_shapes),
            (("CALL ME", "Y"), self._call_me_vs_y),
            (("SLOW", "HELLO"), self._slow_vs_hello),
        )

    def resolve(self, candidates: Sequence[Candidate], hand) -> Optional[Resolution]:
        """Pick one {name, score} for this frame.

        Args:
            candidates: Bank candidates, highest score first (may be empty)
            hand: 21 landmarks for the same frame

        Returns:
            Resolution, or None when there are no candidates or the hand
            is malformed (the caller falls back to geometry alone).
        """
        if not candidates:
            return None
        lm = as_hand(hand)
        if lm is None:
            return None

        top = candidates[0]
        geo = self._analyzer.classify(lm)
        scale = hand_scale(lm)

        # Cross-signal agreement increases trust
        if geo and geo.name == top.name and geo.confidence > self._agree_min:
            return Resolution(top.name, min(MAX_SCORE, top.score * self._boost))

        # Geometry wins when highly confident
        if geo and geo.name != top.name and geo.confidence > self._override_min:
            logger.debug("Geometry override: %s -> %s (%.2f)",
                         top.name, geo.name, geo.confidence)
            return Resolution(geo.name, geo.confidence * MAX_SCORE)

        for names, rule in self._rules:
            if top.name in names:
                resolved = rule(top, lm, scale)
                if resolved != top.name:
                    logger.debug("Conflict rule: %s -> %s", top.name, resolved)
                return Resolution(resolved, top.score)

        return Resolution(top.name, top.score)

    # =========================================================================
    # Cluster rules: each returns the resolved sign name
    # =========================================================================

    @staticmethod
    def _a_vs_s(top, lm, scale) -> str:
        # S: thumb tip lies below the index PIP, i.e. over the fingers
        return "S" if lm[THUMB_TIP][1] > lm[INDEX_PIP][1] else "A"

    def _folded_fist(self, top, lm, scale) -> str:
        states = self._analyzer.finger_states(lm)
        all_curled = not (states["index"] or states["middle"]
                          or states["ring"] or states["pinky"])
        if not all_curled:
            return top.name

        thumb_x, thumb_y = lm[THUMB_TIP][0], lm[THUMB_TIP][1]
        thumb_across = abs(thumb_x - lm[MIDDLE_MCP][0]) < _THUMB_ACROSS_PALM

        # T: thumb pokes up between index and middle
        if thumb_y < lm[INDEX_MCP][1] and not thumb_across:
            return "T"
        # S: thumb wraps horizontally over all fingers
        if thumb_across:
            return "S"
        # M vs N: how many fingertips fold over (below) the thumb
        fingers_over = sum(
            1 for tip in (INDEX_TIP, MIDDLE_TIP, RING_TIP) if lm[tip][1] > thumb_y
        )
        return "M" if fingers_over >= 3 else "N"

    @staticmethod
    def _u_vs_r(top, lm, scale) -> str:
        # R: index and middle lean in opposite directions (crossed)
        index_lean = lm[INDEX_TIP][0] - lm[INDEX_MCP][0]
        middle_lean = lm[MIDDLE_TIP][0] - lm[MIDDLE_MCP][0]
        crossed = _sign(index_lean) != _sign(middle_lean)
        return "R" if crossed else "U"

    @staticmethod
    def _v_vs_peace(top, lm, scale) -> str:
        # PEACE: thumb held noticeably away from the palm
        thumb_reach = distance(lm[THUMB_TIP], lm[WRIST]) / scale
        return "PEACE" if thumb_reach > _PEACE_THUMB_REACH else "V"

    @staticmethod
    def _f_vs_ok(top, lm, scale) -> str:
        pinch = distance(lm[THUMB_TIP], lm[INDEX_TIP]) / scale
        return "OK" if pinch < _OK_PINCH else "F"

    @staticmethod
    def _good_vs_thanks(top, lm, scale) -> str:
        # THANKS angles the fingers more strongly to the right
        middle_dx = lm[MIDDLE_TIP][0] - lm[MIDDLE_MCP][0]
        return "THANKS" if middle_dx > _THANKS_MIDDLE_DX else "GOOD"

    @staticmethod
    def _flat_hand_direction(top, lm, scale) -> str:
        # BAD points down; PLEASE and WAIT are horizontal
        middle_dy = lm[MIDDLE_TIP][1] - lm[MIDDLE_MCP][1]
        if middle_dy > _BAD_MIDDLE_DY:
            return "BAD"
        return "WAIT" if top.name == "WAIT" else "PLEASE"

    @staticmethod
    def _arc_shapes(top, lm, scale) -> str:
        tip_spread = distance(lm[INDEX_TIP], lm[THUMB_TIP]) / scale
        middle_dy = lm[MIDDLE_TIP][1] - lm[MIDDLE_MCP][1]

        if tip_spread < _O_TIP_SPREAD:
            return "O"
        if middle_dy < _EAT_MIDDLE_DY:
            return "EAT"
        if middle_dy > _HOT_MIDDLE_DY:
            return "HOT"
        # DRINK keeps its name only with the thumb standing straight up
        if top.name == "DRINK":
            thumb_dx = lm[THUMB_TIP][0] - lm[THUMB_IP][0]
            thumb_dy = lm[THUMB_TIP][1] - lm[THUMB_IP][1]
            if thumb_dy < 0 and abs(thumb_dy) > abs(thumb_dx) * _DRINK_THUMB_VERTICAL_RATIO:
                return "DRINK"
        return "C"

    @staticmethod
    def _call_me_vs_y(top, lm, scale) -> str:
        horizontal = is_horizontal(lm, PINKY_MCP, PINKY_TIP, _CALL_ME_HORIZONTAL_RATIO)
        return "CALL ME" if horizontal else "Y"

    @staticmethod
    def _slow_vs_hello(top, lm, scale) -> str:
        spread = distance(lm[INDEX_TIP], lm[PINKY_TIP]) / scale
        return "SLOW" if spread < _SLOW_SPREAD else "HELLO"


def _sign(value: float) -> int:
    # numpy bools do not support subtraction
    return int(value > 0) - int(value < 0)
