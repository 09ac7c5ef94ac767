"""
Tests for recency-weighted temporal smoothing
===============================================
"""

import pytest

from signbridge.modules.recognition.temporal_smoother import TemporalSmoother


class TestTemporalSmoother:

    @pytest.fixture
    def smoother(self):
        return TemporalSmoother()

    def test_empty_and_single(self, smoother):
        assert smoother.best() is None
        smoother.push("A", 0.9)
        assert smoother.best() is None

    def test_two_agreeing_frames(self, smoother):
        smoother.push("A", 0.9)
        smoother.push("A", 0.9)
        best = smoother.best()
        assert best.name == "A"
        assert best.confidence == pytest.approx(0.9)

    def test_full_window_of_one_name(self, smoother):
        for _ in range(9):
            smoother.push("Z", 0.9)
        best = smoother.best()
        assert best.name == "Z"
        assert best.confidence <= 1.0

    def test_vote_share_below_threshold_rejected(self, smoother):
        # "A" at positions 9, 8 and 4 of 9: weight 21 of 45
        names = ["B", "C", "D", "A", "E", "F", "G", "A", "A"]
        for name in names:
            smoother.push(name, 0.9)
        assert smoother.best() is None

    def test_vote_share_at_threshold_accepted(self, smoother):
        # "A" at positions 9, 8 and 5 of 9: weight 22 of 45
        names = ["B", "C", "D", "E", "A", "F", "G", "A", "A"]
        for name in names:
            smoother.push(name, 0.9)
        assert smoother.best().name == "A"

    def test_tie_goes_to_first_seen(self, smoother):
        # A: 1 + 2 = 3, B: 3
        for name in ["A", "A", "B"]:
            smoother.push(name, 0.9)
        assert smoother.best().name == "A"

    def test_weighted_confidence(self, smoother):
        smoother.push("A", 0.5)
        smoother.push("A", 1.0)
        # (0.5 * 1 + 1.0 * 2) / 3
        assert smoother.best().confidence == pytest.approx(0.8333, abs=1e-4)

    def test_confidence_capped(self, smoother):
        smoother.push("A", 1.2)
        smoother.push("A", 1.2)
        assert smoother.best().confidence == 1.0

    def test_eviction(self, smoother):
        smoother.push("OLD", 1.0)
        for _ in range(9):
            smoother.push("NEW", 0.5)
        assert len(smoother) == 9
        best = smoother.best()
        assert best.name == "NEW"
        assert best.confidence == pytest.approx(0.5)

    def test_reset(self, smoother):
        smoother.push("A", 0.9)
        smoother.push("A", 0.9)
        smoother.reset()
        assert len(smoother) == 0
        assert smoother.best() is None

    def test_configured_window(self):
        smoother = TemporalSmoother({"window_size": 3, "min_vote_ratio": 0.9})
        for name in ["A", "B", "B", "B"]:
            smoother.push(name, 0.7)
        assert len(smoother) == 3
        assert smoother.best().name == "B"
        smoother.push("A", 0.7)
        # B: 1 + 2 = 3 of 6
        assert smoother.best() is None
