"""
Sign recognition engine: the public per-frame contract.

Per frame:
    landmarks -> gesture bank candidates -> ConflictResolver
    (consulting GeometricAnalyzer) -> OnlineLearner.adjust
    -> TemporalSmoother -> Detection or None

Every collaborator is constructor-injectable; the gesture bank is built
lazily by initialize() through a factory so that a broken registry is
reported instead of raised. One engine serves one tracked hand.
"""

import math
import logging
from typing import Callable, Optional

from signbridge.core.types import Detection, Resolution
from signbridge.modules.detection.landmark_extractor import as_hand, to_pixel_coords
from signbridge.modules.intelligence.online_learner import OnlineLearner
from signbridge.modules.recognition.conflict_resolver import ConflictResolver, MAX_SCORE
from signbridge.modules.recognition.geometric_analyzer import GeometricAnalyzer
from signbridge.modules.recognition.gesture_bank import GestureEstimator
from signbridge.modules.recognition.temporal_smoother import TemporalSmoother
from signbridge.modules.utils.logger import log_timing

logger = logging.getLogger(__name__)

# One frame at 30 fps
_FRAME_BUDGET_MS = 33.0


class SignEngine:
    """Fuses the gesture bank, geometry, learner and smoother per frame.

    Lifecycle: construct -> initialize() -> detect_frame()* with
    reset() on hand loss and reset_session() between users.
    """

    def __init__(
        self,
        config: dict = None,
        analyzer: GeometricAnalyzer = None,
        resolver: ConflictResolver = None,
        learner: OnlineLearner = None,
        smoother: TemporalSmoother = None,
        bank_factory: Callable = None,
    ):
        """Initialize the engine.

        Args:
            config: Full configuration dict keyed by section (geometry,
                    resolver, learner, smoother, engine). Optional.
            analyzer, resolver, learner, smoother: Injected collaborators;
                    defaults are built from the matching config sections.
            bank_factory: Zero-argument callable returning an object with
                    estimate(keypoints, min_score). Defaults to loading
                    the packaged gesture registry.
        """
        config = config or {}
        engine_cfg = config.get("engine", {}) or {}

        # Learner and smoother define __len__, so test against None explicitly
        self._analyzer = analyzer if analyzer is not None else GeometricAnalyzer(config.get("geometry"))
        self._resolver = resolver if resolver is not None else ConflictResolver(
            self._analyzer, config.get("resolver"))
        self._learner = learner if learner is not None else OnlineLearner(config.get("learner"))
        self._smoother = smoother if smoother is not None else TemporalSmoother(config.get("smoother"))

        gestures_path = config.get("gestures_path")
        self._bank_factory = bank_factory or (lambda: GestureEstimator.from_yaml(gestures_path))
        self._max_candidates = engine_cfg.get("max_candidates", 4)
        self._default_threshold = engine_cfg.get("score_threshold", 7.0)

        self._bank = None
        self._ready = False

    def initialize(self) -> bool:
        """Build the gesture bank.

        Returns:
            True when the engine is ready. Failures are logged, never raised.
        """
        try:
            self._bank = self._bank_factory()
        except Exception as e:
            logger.error("Gesture engine initialization failed: %s", e)
            self._bank = None
            self._ready = False
            return False

        if self._bank is None:
            logger.error("Gesture engine initialization failed: no gesture bank")
            self._ready = False
            return False

        self._ready = True
        logger.info("Gesture engine ready")
        return True

    @log_timing(warn_ms=_FRAME_BUDGET_MS)
    def detect_frame(self, hand, frame_width: float, frame_height: float,
                     score_threshold: Optional[float] = None) -> Optional[Detection]:
        """Process one frame of landmarks.

        Args:
            hand: 21 normalized landmarks (see landmark_extractor.as_hand)
            frame_width, frame_height: Frame size in pixels
            score_threshold: Minimum bank score (0-10), defaults to the
                             configured engine.score_threshold

        Returns:
            Detection with the smoothed sign, or None without consensus
        """
        if not self._ready:
            return None
        lm = as_hand(hand)
        if lm is None:
            return None

        if score_threshold is None:
            score_threshold = self._default_threshold

        keypoints = to_pixel_coords(lm, frame_width, frame_height)
        try:
            candidates = list(self._bank.estimate(keypoints, score_threshold) or [])
            candidates.sort(key=lambda c: float(c.score), reverse=True)
            candidates = candidates[:self._max_candidates]
        except Exception as e:
            logger.debug("Gesture bank estimate failed: %s", e)
            candidates = []

        resolved = self._resolver.resolve(candidates, lm)
        if resolved is None:
            geo = self._analyzer.classify(lm)
            if geo is None:
                # Neither signal has an opinion
                self._smoother.reset()
                return None
            resolved = Resolution(geo.name, geo.confidence * MAX_SCORE)

        score = self._learner.adjust(resolved.name, resolved.score)
        confidence = max(0.0, min(1.0, score / MAX_SCORE))
        self._smoother.push(resolved.name, confidence)

        best = self._smoother.best()
        if best is None:
            return None
        # Half-up rounding to a whole percent
        return Detection(best.name, int(math.floor(best.confidence * 100 + 0.5)))

    def confirm_sign(self, name: str, raw_score: float):
        """Feed a host-confirmed sign (0-10 score) to the online learner."""
        self._learner.observe(name, raw_score)

    def reset(self):
        """Hand lost: clear the smoothing window, keep learned statistics."""
        self._smoother.reset()

    def reset_session(self):
        """New user or session: clear smoothing window and learned statistics."""
        self._smoother.reset()
        self._learner.reset()
        logger.info("Session reset")

    @property
    def is_ready(self) -> bool:
        return self._ready

    def debug_snapshot(self) -> dict:
        """Independent copy of internal state for diagnostics."""
        return {"learner": self._learner.dump()}
