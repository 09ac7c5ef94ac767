"""
Online confidence adaptation - learns each signer's typical score per sign.

Only confirmed signs feed the statistics. Once a sign has been confirmed
often enough, its raw scores are shifted toward a common target so that
signers whose hand shape scores consistently low still pass thresholds.
Statistics live for one session and are never persisted.
"""

import logging

from signbridge.core.types import LearnerStat

logger = logging.getLogger(__name__)


class OnlineLearner:
    """Per-session exponential moving average of confirmed sign scores."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._alpha = config.get("alpha", 0.12)
        self._target = config.get("target_score", 8.5)
        self._max_offset = config.get("max_offset", 2.5)
        self._min_confirmations = config.get("min_confirmations", 8)

        self._stats = {}  # sign name -> LearnerStat

    def observe(self, name: str, raw_score: float):
        """Record a confirmed detection.

        The first observation seeds the average with the raw score itself,
        so the count lags the number of blended samples by one.
        """
        stat = self._stats.get(name)
        if stat is None:
            stat = LearnerStat(ema=raw_score)
            self._stats[name] = stat
        stat.count += 1
        stat.ema = self._alpha * raw_score + (1 - self._alpha) * stat.ema

        if stat.count == self._min_confirmations:
            logger.info("Adapting '%s': ema=%.2f after %d confirmations",
                        name, stat.ema, stat.count)

    def adjust(self, name: str, raw_score: float) -> float:
        """Shift a raw score by the learned per-sign offset.

        Returns the raw score unchanged until the sign has enough
        confirmations; afterwards adds (target - ema) clamped to
        +/- max_offset.
        """
        stat = self._stats.get(name)
        if stat is None or stat.count < self._min_confirmations:
            return raw_score
        offset = max(-self._max_offset, min(self._max_offset, self._target - stat.ema))
        return raw_score + offset

    def count(self, name: str) -> int:
        """Number of confirmed observations for a sign (0 if unseen)."""
        stat = self._stats.get(name)
        return stat.count if stat else 0

    def dump(self) -> dict:
        """Independent copy of all statistics: {name: {"ema", "count"}}."""
        return {name: stat.to_dict() for name, stat in self._stats.items()}

    def reset(self):
        """Forget all statistics."""
        if self._stats:
            logger.debug("Learner reset (%d signs)", len(self._stats))
        self._stats.clear()

    def __len__(self):
        return len(self._stats)
