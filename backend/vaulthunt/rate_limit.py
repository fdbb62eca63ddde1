import threading
import time
from collections import deque
from typing import Deque, Dict, Tuple


class RateLimiter:
    """Sliding-window request counter keyed by (client address, session code).

    One instance lives in ``app.extensions``; a multi-instance deployment would
    swap it for a shared counter store behind the same ``check`` method.
    """

    def __init__(self, max_requests: int = 60, window_seconds: int = 60, clock=time.monotonic):
        self.max_requests = int(max_requests)
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._hits: Dict[Tuple[str, str], Deque[float]] = {}
        self._lock = threading.Lock()
        self._checks = 0

    def check(self, client_ip: str, session_code: str) -> bool:
        """Record a request and return False when it exceeds the limit."""
        key = (client_ip or 'unknown', session_code or 'global')
        now = self._clock()
        with self._lock:
            self._checks += 1
            if self._checks % 100 == 0:
                self._cleanup(now)
            hits = self._hits.setdefault(key, deque())
            self._expire(hits, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def remaining(self, client_ip: str, session_code: str) -> int:
        key = (client_ip or 'unknown', session_code or 'global')
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return self.max_requests
            self._expire(hits, self._clock())
            return max(0, self.max_requests - len(hits))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _expire(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()

    def _cleanup(self, now: float) -> None:
        for key in list(self._hits):
            hits = self._hits[key]
            self._expire(hits, now)
            if not hits:
                del self._hits[key]
