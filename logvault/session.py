"""Process-wide session registry.

A session id groups every record written between two rotations. Readers take
the current id without locking; rotation swaps in a fresh id under a lock so
concurrent rotations never interleave.
"""

import threading
import uuid


class SessionRegistry:
    def __init__(self, id_factory=None):
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()).upper())
        self._lock = threading.Lock()
        self._current: str = self._id_factory()

    def current(self) -> str:
        # Single attribute load; always sees a complete id.
        return self._current

    def rotate(self) -> str:
        """Replace the active id with a fresh one and return it."""
        with self._lock:
            previous = self._current
            new_id = self._id_factory()
            while new_id == previous:
                new_id = self._id_factory()
            self._current = new_id
            return new_id


_registry = SessionRegistry()


def default_registry() -> SessionRegistry:
    return _registry


def current_session() -> str:
    return _registry.current()


def start_session() -> str:
    """Start a new log session for the whole process."""
    return _registry.rotate()
