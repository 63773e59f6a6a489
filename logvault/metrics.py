"""Thread-safe counters for the durable writer."""

import threading


class WriterMetrics:
    """Counts records written, failed in the store, and dropped before queueing."""

    def __init__(self):
        self._lock = threading.Lock()
        self._written = 0
        self._failed = 0
        self._dropped = 0

    def record_written(self):
        with self._lock:
            self._written += 1

    def record_failed(self):
        with self._lock:
            self._failed += 1

    def record_dropped(self):
        with self._lock:
            self._dropped += 1

    @property
    def written(self) -> int:
        with self._lock:
            return self._written

    @property
    def failed(self) -> int:
        with self._lock:
            return self._failed

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    def snapshot(self) -> dict:
        """Read all counters atomically."""
        with self._lock:
            return {
                "written": self._written,
                "failed": self._failed,
                "dropped": self._dropped,
            }
