"""Persisted record model for the log store."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MetadataEntry:
    key: str
    value: str


@dataclass
class LogRecord:
    created_at: datetime
    level: int           # stdlib levelno: DEBUG=10 ... CRITICAL=50
    label: str           # emitting subsystem
    session: str         # session id active when the record was accepted
    text: str
    metadata: list[MetadataEntry] = field(default_factory=list)
    file: str | None = None
    function: str | None = None
    line: int | None = None

    def metadata_dict(self) -> dict[str, str]:
        return {entry.key: entry.value for entry in self.metadata}
