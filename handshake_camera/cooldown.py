"""
Cooldown Gate - Rate limits handshake captures.

Turns the per-frame handshake signal into at most one trigger per
cooldown window, so one continuous handshake yields one photo.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CooldownGate:
    """
    Timestamp debounce for capture triggers.

    All timestamps are in milliseconds from the same monotonic clock.
    Must be driven from a single task; there is no locking.
    """

    def __init__(self, cooldown_ms: float = 3000):
        """
        Initialize CooldownGate.

        Args:
            cooldown_ms: Minimum time between two accepted triggers
        """
        self.cooldown_ms = cooldown_ms
        self._last_trigger_time: Optional[float] = None
        self._accepted_count = 0
        self._suppressed_count = 0

    @property
    def last_trigger_time(self) -> Optional[float]:
        return self._last_trigger_time

    def try_trigger(self, now: float) -> bool:
        """
        Attempt a trigger at time `now`.

        Returns:
            True if accepted (state updated), False if still cooling down
        """
        if self._last_trigger_time is not None and now - self._last_trigger_time < self.cooldown_ms:
            self._suppressed_count += 1
            return False

        self._last_trigger_time = now
        self._accepted_count += 1
        return True

    def remaining(self, now: float) -> float:
        """Milliseconds until the next trigger would be accepted."""
        if self._last_trigger_time is None:
            return 0.0
        return max(0.0, self.cooldown_ms - (now - self._last_trigger_time))

    def reset(self) -> None:
        """Forget the last trigger."""
        self._last_trigger_time = None

    def get_stats(self) -> dict:
        return {
            "accepted": self._accepted_count,
            "suppressed": self._suppressed_count,
            "last_trigger_time": self._last_trigger_time,
        }
