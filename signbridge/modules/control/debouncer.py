"""
Hold-to-confirm debouncer for recognized signs.

A sign must stay the detected label for the debounce time before it is
confirmed, and the same sign cannot be confirmed again within the
cooldown. Holding a sign therefore confirms it once per debounce period
at most, and a repeated sign needs the cooldown to elapse.

Lifecycle (called by the host loop):
    update(name, now)  - current per-frame detection
    lost()             - no hand / no detection this frame
"""

import time
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class SignDebouncer:
    """Decides when a held sign becomes a confirmed sign."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._debounce_ms = config.get("debounce_ms", 380)
        self._cooldown_ms = config.get("cooldown_ms", 1400)

        # Pending hold
        self._pending = None
        self._pending_since = 0.0  # ms

        # Last confirmation
        self._last_confirmed = None
        self._last_confirm_time = None  # ms

    def update(self, name: str, now: Optional[float] = None) -> bool:
        """Feed the current detection.

        Args:
            name: Detected sign name this frame
            now: Timestamp in seconds (defaults to time.time())

        Returns:
            True when this call confirms the sign.
        """
        now_ms = (time.time() if now is None else now) * 1000

        if name != self._pending:
            self._pending = name
            self._pending_since = now_ms
            return False

        if now_ms - self._pending_since < self._debounce_ms:
            return False

        # Hold satisfied: either confirm or hit the cooldown, then re-arm
        self._pending = None
        if (name == self._last_confirmed and self._last_confirm_time is not None
                and now_ms - self._last_confirm_time < self._cooldown_ms):
            logger.debug("'%s' within cooldown, not confirmed", name)
            return False

        self._last_confirmed = name
        self._last_confirm_time = now_ms
        logger.debug("'%s' confirmed after %.0fms hold", name, now_ms - self._pending_since)
        return True

    def lost(self):
        """Hand or detection lost: drop the pending hold."""
        self._pending = None

    def reset(self):
        """Clear all state."""
        self._pending = None
        self._pending_since = 0.0
        self._last_confirmed = None
        self._last_confirm_time = None

    @property
    def pending(self) -> Optional[str]:
        return self._pending
