from __future__ import annotations
import math
import threading
import time
from typing import Callable, Dict, Tuple


class RateLimitExceeded(Exception):
    def __init__(self, retry_after: int):
        super().__init__(f"rate limit exceeded, retry in {retry_after}s")
        self.retry_after = retry_after


class FixedWindowRateLimiter:
    """Counts hits per key in fixed windows of ``window_seconds``.

    A key's window starts at its first hit; once ``max_requests`` hits are
    recorded, further hits fail until the window ends.
    """

    def __init__(self, max_requests: int, window_seconds: float,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> None:
        now = self.clock()
        with self._lock:
            start, count = self._windows.get(key, (now, 0))
            if now - start >= self.window_seconds:
                start, count = now, 0
            if count >= self.max_requests:
                retry_after = max(1, math.ceil(start + self.window_seconds - now))
                raise RateLimitExceeded(retry_after)
            self._windows[key] = (start, count + 1)
            self._prune(now)

    def _prune(self, now: float) -> None:
        if len(self._windows) < 10000:
            return
        expired = [k for k, (s, _) in self._windows.items() if now - s >= self.window_seconds]
        for k in expired:
            del self._windows[k]
