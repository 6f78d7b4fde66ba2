from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class FrameThrottle:
    """Lets a frame through at most once per `interval_s` seconds."""

    def __init__(self, interval_s: float = 0.1, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval_s = interval_s
        self._clock = clock
        self._last: Optional[float] = None

    def ready(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self.interval_s:
            return False
        self._last = now
        return True


class PredictionSlot:
    """
    Latest resolved label, shared between the pipeline thread and a reader.

    Publishing None keeps the previous label.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._label: Optional[str] = None

    def publish(self, label: Optional[str]) -> None:
        if label is None:
            return
        with self._lock:
            self._label = label

    def get(self) -> Optional[str]:
        with self._lock:
            return self._label
