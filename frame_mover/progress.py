"""Progress delivery from the worker to the controlling interface."""

import threading
from typing import Optional

from .models import ProgressSnapshot

# Scanned count at which the estimate reaches 50%
PERCENT_HALF_POINT = 200
MAX_RUNNING_PERCENT = 99.0


def estimate_percent(scanned: int) -> float:
    """
    Estimate completion while the total file count is still unknown.

    Non-decreasing in `scanned` and always below 100; only a finished run
    reports 100.
    """
    if scanned <= 0:
        return 0.0
    percent = 100.0 * scanned / (scanned + PERCENT_HALF_POINT)
    return round(min(percent, MAX_RUNNING_PERCENT), 1)


class ProgressChannel:
    """Latest-wins mailbox for progress snapshots.

    `publish()` never blocks the worker; an unconsumed snapshot is simply
    replaced by the next one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._available = threading.Condition(self._lock)
        self._latest: Optional[ProgressSnapshot] = None
        self._pending = False
        self._published = 0

    def publish(self, snapshot: ProgressSnapshot) -> None:
        with self._available:
            self._latest = snapshot
            self._pending = True
            self._published += 1
            self._available.notify_all()

    __call__ = publish

    def get(self, timeout: Optional[float] = None) -> Optional[ProgressSnapshot]:
        """Wait for and consume the newest unseen snapshot; None on timeout."""
        with self._available:
            if not self._pending:
                self._available.wait(timeout)
            if not self._pending:
                return None
            self._pending = False
            return self._latest

    @property
    def latest(self) -> Optional[ProgressSnapshot]:
        """Newest snapshot, consumed or not."""
        with self._lock:
            return self._latest

    @property
    def published(self) -> int:
        with self._lock:
            return self._published
