"""
Multi-frame temporal smoothing for sign stability.
Weighted majority vote over a short window of per-frame labels,
with linear recency bias so the newest frames count the most.
"""

import logging
from collections import deque
from typing import Optional

from signbridge.core.types import HistoryEntry

logger = logging.getLogger(__name__)


class TemporalSmoother:
    """Smooths per-frame sign labels using recency-weighted voting.

    Suppresses single-frame flicker: a label is only emitted once it holds
    a weighted majority share of the window.
    """

    def __init__(self, config: dict = None):
        config = config or {}
        self._window_size = config.get("window_size", 9)
        self._min_vote_ratio = config.get("min_vote_ratio", 0.48)

        # Window of recent labels, oldest first
        self._window = deque(maxlen=self._window_size)

    def push(self, name: str, confidence: float):
        """Append a per-frame label; the oldest entry is evicted at capacity."""
        self._window.append(HistoryEntry(name, confidence))

    def best(self) -> Optional[HistoryEntry]:
        """Current consensus label.

        Weights grow linearly with recency (1 for the oldest entry, n for
        the newest). A name is eligible when its weight share reaches the
        vote ratio; among eligible names the heaviest wins and ties go to
        the name seen first in the window.

        Returns:
            HistoryEntry with the winner's recency-weighted average
            confidence (capped at 1.0), or None without consensus.
        """
        n = len(self._window)
        if n < 2:
            return None

        votes = {}
        weighted_conf = {}
        for i, entry in enumerate(self._window):
            weight = i + 1
            votes[entry.name] = votes.get(entry.name, 0) + weight
            weighted_conf[entry.name] = weighted_conf.get(entry.name, 0.0) + entry.confidence * weight

        total_weight = n * (n + 1) / 2

        winner = None
        for name, count in votes.items():
            if count / total_weight < self._min_vote_ratio:
                continue
            # Strictly greater keeps the first-seen name on ties
            if winner is None or count > votes[winner]:
                winner = name

        if winner is None:
            return None

        confidence = min(1.0, weighted_conf[winner] / votes[winner])
        return HistoryEntry(winner, confidence)

    def reset(self):
        """Clear smoothing window."""
        self._window.clear()

    def __len__(self):
        return len(self._window)
