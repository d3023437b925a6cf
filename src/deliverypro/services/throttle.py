"""Call spacing for third-party providers shared across worker threads."""

from __future__ import annotations

import threading
import time
from typing import Callable


class Throttle:
    """Enforce a minimum interval between consecutive outbound calls."""

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: float | None = None

    def wait(self) -> None:
        if self.min_interval <= 0:
            return
        with self._lock:
            now = self._clock()
            if self._last_call is not None:
                elapsed = now - self._last_call
                if elapsed < self.min_interval:
                    self._sleep(self.min_interval - elapsed)
                    now = self._clock()
            self._last_call = now
