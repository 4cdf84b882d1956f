"""
Refresh throttle for standings auto-refresh on read.

An optimization only: state may be lost on restart. The store is injectable
so a shared cache can replace the in-process map without touching callers.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Hashable, Optional, Protocol


class RefreshThrottle(Protocol):
    def try_acquire(self, key: Hashable) -> bool:
        """True (and start a cooldown window) if `key` may refresh now."""
        ...


class InMemoryRefreshThrottle:
    """Per-key monotonic timestamp map with a fixed cooldown."""

    def __init__(self, cooldown_seconds: float, clock: Optional[Callable[[], float]] = None) -> None:
        self._cooldown = max(0.0, float(cooldown_seconds))
        self._clock = clock or time.monotonic
        self._last: Dict[Hashable, float] = {}
        self._lock = threading.Lock()

    def try_acquire(self, key: Hashable) -> bool:
        now = self._clock()
        with self._lock:
            last = self._last.get(key)
            if last is not None and now - last < self._cooldown:
                return False
            self._last[key] = now
            return True

    def reset(self) -> None:
        with self._lock:
            self._last.clear()


_default_throttle: Optional[InMemoryRefreshThrottle] = None


def get_refresh_throttle() -> RefreshThrottle:
    """Process-wide default throttle (cooldown from settings)."""
    global _default_throttle
    if _default_throttle is None:
        from core.config import get_settings

        _default_throttle = InMemoryRefreshThrottle(get_settings().standings_refresh_cooldown_seconds)
    return _default_throttle
