"""Persistent logging handler — turns each log call into one stored record."""

import logging
from typing import Any, Mapping

from logvault import session
from logvault.clock import utc_now
from logvault.metadata import normalize, resolve_timestamp
from logvault.models import LogRecord
from logvault.store import LogStore

logger = logging.getLogger(__name__)

# Records from our own loggers never go back into the store.
_INTERNAL_PREFIX = "logvault"


class PersistentLogHandler(logging.Handler):
    """
    logging.Handler that persists records to a LogStore.

    Each handler carries its own label, default metadata and minimum level.
    Writes go through the store's shared background writer, so log() and
    emit() return without touching the database and never raise.
    """

    def __init__(
        self,
        label: str | None = None,
        store: LogStore | None = None,
        log_level: int = logging.INFO,
        metadata: Mapping[str, Any] | None = None,
        time_func=None,
        registry: session.SessionRegistry | None = None,
    ):
        super().__init__(level=log_level)
        self.label = label
        self.metadata: dict[str, Any] = dict(metadata or {})
        self._store = store
        self._time_func = time_func or utc_now
        self._registry = registry or session.default_registry()

    @property
    def store(self) -> LogStore:
        if self._store is None:
            self._store = LogStore.default()
        return self._store

    @property
    def log_level(self) -> int:
        return self.level

    @log_level.setter
    def log_level(self, level: int | str):
        self.setLevel(level)

    def __getitem__(self, key: str) -> Any:
        return self.metadata.get(key)

    def __setitem__(self, key: str, value: Any):
        if value is None:
            self.metadata.pop(key, None)
        else:
            self.metadata[key] = value

    def __delitem__(self, key: str):
        self.metadata.pop(key, None)

    @staticmethod
    def start_session() -> str:
        """Begin a new process-wide log session and return its id."""
        return session.start_session()

    def log(
        self,
        level: int,
        message: Any,
        metadata: Mapping[str, Any] | None = None,
        label: str | None = None,
        file: str | None = None,
        function: str | None = None,
        line: int | None = None,
    ) -> None:
        if level < self.level:
            return

        try:
            # Session and timestamp are fixed here, at acceptance time.
            created_at = resolve_timestamp(metadata, self._time_func)
            merged = {**self.metadata, **(metadata or {})}
            record = LogRecord(
                created_at=created_at,
                level=level,
                label=label or self.label or "",
                session=self._registry.current(),
                text=str(message),
                metadata=normalize(merged),
                file=file,
                function=function,
                line=line,
            )
            self.store.writer.enqueue(record)
        except Exception as e:
            logger.debug("Dropped log call from %s: %s", label or self.label, e)

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == _INTERNAL_PREFIX or record.name.startswith(_INTERNAL_PREFIX + "."):
            return
        try:
            metadata = getattr(record, "metadata", None)
            if not isinstance(metadata, Mapping):
                metadata = None
            self.log(
                record.levelno,
                record.getMessage(),
                metadata=metadata,
                label=self.label or record.name,
                file=record.pathname,
                function=record.funcName,
                line=record.lineno,
            )
        except Exception:
            self.handleError(record)
