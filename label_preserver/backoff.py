"""
Retry delays after failed reconciliations.

Attempts are counted per node name, so one failing node does not slow
down retries for the others.
"""

import threading
from typing import Dict

# 2 ** 64 * base is far beyond any sane maximum
_MAX_EXPONENT = 64


class Backoff:
    """Exponential backoff keyed by node name."""

    def __init__(self, base: float, maximum: float):
        if base <= 0 or maximum <= 0:
            raise ValueError("base and maximum must be positive")
        self.base = base
        self.maximum = maximum
        self._attempts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def next_delay(self, key: str) -> float:
        """Record a failure for ``key`` and return how long to wait before retrying."""
        with self._lock:
            attempt = self._attempts.get(key, 0) + 1
            self._attempts[key] = attempt
        return min(self.base * 2 ** min(attempt, _MAX_EXPONENT), self.maximum)

    def attempts(self, key: str) -> int:
        with self._lock:
            return self._attempts.get(key, 0)

    def forget(self, key: str):
        """Drop the failure history for ``key``."""
        with self._lock:
            self._attempts.pop(key, None)
