"""Durable writer — one background thread applying records to a store in FIFO order."""

import logging
import queue
import threading

from logvault.metrics import WriterMetrics

logger = logging.getLogger(__name__)

_STOP = object()


class _Barrier:
    """Queue marker: set once every item queued ahead of it has been handled."""

    def __init__(self):
        self.reached = threading.Event()


class DurableWriter:
    """Producer-consumer writer that keeps store I/O off the logging thread.

    Callers enqueue records and return immediately. A single worker thread
    dequeues them in order and calls store.save(); a failing save is counted
    and skipped, never raised.
    """

    def __init__(self, store, queue_size: int = 10000):
        self._store = store
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._metrics = WriterMetrics()
        self._closed = threading.Event()
        self._overflowing = False
        self._failure_reported = False
        self._thread = threading.Thread(
            target=self._run, name="logvault-writer", daemon=True,
        )
        self._thread.start()

    @property
    def metrics(self) -> WriterMetrics:
        return self._metrics

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, record) -> bool:
        """Queue a record for writing. Returns False if it was dropped."""
        if self._closed.is_set():
            self._metrics.record_dropped()
            return False
        try:
            self._queue.put_nowait(record)
        except queue.Full:
            self._metrics.record_dropped()
            if not self._overflowing:
                self._overflowing = True
                logger.warning("Write queue full (%d), dropping log records",
                               self._queue.maxsize)
            return False
        self._overflowing = False
        return True

    def flush(self, timeout: float | None = None) -> bool:
        """Block until everything enqueued so far is handled. False on timeout."""
        if not self._thread.is_alive():
            return self._queue.empty()
        barrier = _Barrier()
        try:
            self._queue.put(barrier, timeout=timeout)
        except queue.Full:
            return False
        return barrier.reached.wait(timeout)

    def close(self, timeout: float = 5.0):
        """Reject new records, drain the queue and stop the worker."""
        if self._closed.is_set():
            return
        self._closed.set()
        try:
            self._queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning("Writer queue still full after %.1fs, stopping anyway", timeout)
        self._thread.join(timeout=timeout)
        snapshot = self._metrics.snapshot()
        logger.info(
            "Writer closed: written=%d, failed=%d, dropped=%d",
            snapshot["written"], snapshot["failed"], snapshot["dropped"],
        )

    def _run(self):
        while True:
            try:
                item = self._queue.get(timeout=0.5)
            except queue.Empty:
                # close() may have given up on queueing the stop marker
                if self._closed.is_set():
                    break
                continue
            if item is _STOP:
                break
            self._handle(item)
        self._drain()

    def _drain(self):
        """Apply anything that raced in behind the stop marker."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is not _STOP:
                self._handle(item)

    def _handle(self, item):
        if isinstance(item, _Barrier):
            item.reached.set()
            return
        try:
            self._store.save(item)
        except Exception as e:
            self._metrics.record_failed()
            if not self._failure_reported:
                self._failure_reported = True
                logger.warning("Failed to persist log record, discarding: %s", e)
            else:
                logger.debug("Failed to persist log record, discarding: %s", e)
            return
        self._metrics.record_written()
