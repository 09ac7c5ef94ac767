"""
Tests for the geometric sign classifier and landmark helpers
=============================================================
"""

import math
from types import SimpleNamespace

import numpy as np
import pytest

from signbridge.modules.detection.landmark_extractor import (
    as_hand, angle_at, finger_states, hand_scale, to_pixel_coords,
)
from signbridge.modules.recognition.geometric_analyzer import GeometricAnalyzer

from hand_builders import build_hand, thumbs_up_hand


def thumb_at_angle(degrees: float, length: float = 0.15) -> tuple:
    """Thumb tip placed so the angle at the thumb MCP (toward the index
    knuckle) equals the given value."""
    mcp_x, mcp_y = 0.40, 0.72
    base = math.atan2(0.62 - mcp_y, 0.45 - mcp_x)
    theta = base - math.radians(degrees)
    return (mcp_x + length * math.cos(theta), mcp_y + length * math.sin(theta))


class TestLandmarkHelpers:
    """Hand coercion and measurement helpers."""

    def test_accepts_numpy_array(self):
        hand = build_hand()
        assert as_hand(hand).shape == (21, 3)

    def test_accepts_nested_lists(self):
        hand = build_hand().tolist()
        assert as_hand(hand).shape == (21, 3)

    def test_accepts_landmark_objects(self):
        points = [SimpleNamespace(x=p[0], y=p[1], z=p[2]) for p in build_hand()]
        result = SimpleNamespace(landmark=points)
        np.testing.assert_allclose(as_hand(result), build_hand())

    @pytest.mark.parametrize("bad", [
        None,
        [],
        np.zeros((20, 3)),
        np.zeros((21, 2)),
        "not a hand",
        42,
    ])
    def test_rejects_malformed(self, bad):
        assert as_hand(bad) is None

    def test_rejects_non_finite(self):
        hand = build_hand()
        hand[8, 0] = np.nan
        assert as_hand(hand) is None

    def test_hand_scale_and_floor(self):
        assert hand_scale(build_hand()) == pytest.approx(0.20)
        assert hand_scale(np.zeros((21, 3))) == 0.01

    def test_angle_at(self):
        a, b, c = np.array([1.0, 0, 0]), np.zeros(3), np.array([0, 1.0, 0])
        assert angle_at(a, b, c) == pytest.approx(90.0)
        assert angle_at(b, b, c) == 0.0

    def test_pixel_projection(self):
        hand = build_hand()
        hand[0, 2] = -0.1
        pixels = to_pixel_coords(hand, 640, 480)
        assert pixels[0, 0] == pytest.approx(320.0)
        assert pixels[0, 1] == pytest.approx(384.0)
        assert pixels[0, 2] == pytest.approx(-64.0)
        # Input untouched
        assert hand[0, 0] == pytest.approx(0.50)

    def test_finger_states(self):
        states = finger_states(build_hand("index", "pinky"))
        assert states == {
            "thumb": False, "index": True, "middle": False,
            "ring": False, "pinky": True,
        }


class TestGeometricAnalyzer:
    """Decision table of the geometric classifier."""

    @pytest.fixture
    def analyzer(self):
        return GeometricAnalyzer()

    def _classify(self, analyzer, hand):
        match = analyzer.classify(hand)
        return (match.name, match.confidence) if match else None

    def test_malformed_returns_none(self, analyzer):
        assert analyzer.classify(None) is None
        assert analyzer.classify(build_hand()[:20]) is None
        assert analyzer.finger_states(None) is None

    def test_deterministic(self, analyzer):
        hand = build_hand("thumb", "index", "pinky")
        assert analyzer.classify(hand) == analyzer.classify(hand.copy())

    def test_thumbs_up(self, analyzer):
        assert self._classify(analyzer, thumbs_up_hand()) == ("THUMBS UP", 0.95)

    def test_thumbs_down(self, analyzer):
        hand = build_hand(thumb=(0.40, 0.98))
        assert self._classify(analyzer, hand) == ("THUMBS DOWN", 0.95)

    def test_l_shape_wide_angle(self, analyzer):
        hand = build_hand("index", thumb=thumb_at_angle(70))
        assert self._classify(analyzer, hand) == ("L", 0.90)

    def test_l_shape_narrow_angle_defers(self, analyzer):
        hand = build_hand("index", thumb=thumb_at_angle(40))
        assert analyzer.finger_states(hand)["thumb"]
        assert analyzer.classify(hand) is None

    def test_i_love_you(self, analyzer):
        hand = build_hand("thumb", "index", "pinky")
        assert self._classify(analyzer, hand) == ("I LOVE YOU", 0.92)

    def test_call_me_horizontal_pinky(self, analyzer):
        hand = build_hand("thumb", pinky=(0.90, 0.62))
        assert self._classify(analyzer, hand) == ("CALL ME", 0.85)

    def test_y_vertical_pinky(self, analyzer):
        hand = build_hand("thumb", "pinky")
        assert self._classify(analyzer, hand) == ("Y", 0.88)

    def test_hello_fingers_together(self, analyzer):
        hand = build_hand("thumb", "index", "middle", "ring", "pinky")
        assert self._classify(analyzer, hand) == ("HELLO", 0.80)

    def test_stop_fingers_spread(self, analyzer):
        hand = build_hand("thumb", "middle", "ring",
                          index=(0.30, 0.34), pinky=(0.72, 0.42))
        assert self._classify(analyzer, hand) == ("STOP", 0.85)

    def test_d_thumb_touching_middle(self, analyzer):
        assert self._classify(analyzer, build_hand("index")) == ("D", 0.84)

    def test_d_loose(self, analyzer):
        # Middle finger opened away from the thumb, still not extended
        hand = build_hand("index", middle=(0.56, 0.50))
        assert not analyzer.finger_states(hand)["middle"]
        assert self._classify(analyzer, hand) == ("D", 0.72)

    def test_w(self, analyzer):
        hand = build_hand("index", "middle", "ring")
        assert self._classify(analyzer, hand) == ("W", 0.86)

    def test_u_fingers_together(self, analyzer):
        assert self._classify(analyzer, build_hand("index", "middle")) == ("U", 0.84)

    def test_v_fingers_spread(self, analyzer):
        hand = build_hand(index=(0.36, 0.34), middle=(0.56, 0.31))
        assert self._classify(analyzer, hand) == ("V", 0.88)

    def test_ok_pinch(self, analyzer):
        hand = build_hand("middle", "ring", "pinky")
        assert self._classify(analyzer, hand) == ("OK", 0.86)

    def test_eat_thumb_rising(self, analyzer):
        hand = build_hand(thumb=(0.45, 0.66), overrides={3: (0.44, 0.73)})
        assert self._classify(analyzer, hand) == ("EAT", 0.70)

    def test_fist_defers(self, analyzer):
        assert analyzer.classify(build_hand()) is None

    def test_custom_confidences(self):
        analyzer = GeometricAnalyzer({"confidences": {"THUMBS UP": 0.5}})
        assert analyzer.classify(thumbs_up_hand()).confidence == 0.5

    def test_custom_thresholds(self):
        # With the thumb never extended, a raised thumb over a fist reads as EAT
        analyzer = GeometricAnalyzer({"extension_thresholds": {"thumb": 10.0}})
        assert analyzer.thresholds["thumb"] == 10.0
        assert analyzer.thresholds["index"] == 1.60
        assert analyzer.classify(thumbs_up_hand()).name == "EAT"
