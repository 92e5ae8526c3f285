import time
from threading import Lock

import config
from errors import TooManyRequests
from fastapi import Request


class FixedWindowLimiter:
    """Counts hits per key in fixed windows of ``window_seconds``."""

    def __init__(self, max_requests: int, window_seconds: int, clock=time.time):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.windows: dict[str, tuple[int, int]] = {}  # key -> (window, count)
        self.current_window: int | None = None
        self.lock = Lock()

    def hit(self, key: str) -> bool:
        current_window = int(self.clock() // self.window_seconds)
        with self.lock:
            if current_window != self.current_window:
                # Counts from earlier windows can never block again
                self.windows = {k: v for k, v in self.windows.items() if v[0] >= current_window}
                self.current_window = current_window
            window, count = self.windows.get(key, (current_window, 0))
            if window != current_window:
                window, count = current_window, 0
            if count >= self.max_requests:
                return False
            self.windows[key] = (window, count + 1)
            return True

    def reset(self) -> None:
        with self.lock:
            self.windows.clear()
            self.current_window = None


class RateLimit:
    """FastAPI dependency rejecting clients over the limiter's budget."""

    def __init__(self, limiter: FixedWindowLimiter):
        self.limiter = limiter

    def __call__(self, request: Request) -> None:
        key = request.client.host if request.client else "unknown"
        if not self.limiter.hit(key):
            raise TooManyRequests()


api_limiter = FixedWindowLimiter(config.API_RATE_LIMIT, config.API_RATE_WINDOW_SECONDS)
redirect_limiter = FixedWindowLimiter(config.REDIRECT_RATE_LIMIT, config.REDIRECT_RATE_WINDOW_SECONDS)
