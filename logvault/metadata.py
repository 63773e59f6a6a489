"""Metadata normalizer — flattens per-call metadata into string key/value pairs.

Values are wrapped in a small tagged variant so the normalizer decides what to
keep by kind rather than by probing arbitrary objects:

    STRING              kept as-is
    STRING_CONVERTIBLE  kept as str(value)
    DICTIONARY, ARRAY   dropped
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from logvault.models import MetadataEntry

logger = logging.getLogger(__name__)

# Reserved key: lets replay/import tools stamp a record with its original time.
CREATED_AT_KEY = "createdAt"


class ValueKind(enum.Enum):
    STRING = "string"
    STRING_CONVERTIBLE = "stringConvertible"
    DICTIONARY = "dictionary"
    ARRAY = "array"


@dataclass(frozen=True)
class MetadataValue:
    kind: ValueKind
    value: Any

    @classmethod
    def string(cls, value: str) -> "MetadataValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def convertible(cls, value: Any) -> "MetadataValue":
        return cls(ValueKind.STRING_CONVERTIBLE, value)

    @classmethod
    def dictionary(cls, value: Mapping) -> "MetadataValue":
        return cls(ValueKind.DICTIONARY, value)

    @classmethod
    def array(cls, value) -> "MetadataValue":
        return cls(ValueKind.ARRAY, value)


def lift(raw: Any) -> MetadataValue:
    """Wrap a plain Python value in the matching MetadataValue kind."""
    if isinstance(raw, MetadataValue):
        return raw
    if isinstance(raw, str):
        return MetadataValue.string(raw)
    if isinstance(raw, Mapping):
        return MetadataValue.dictionary(raw)
    if isinstance(raw, (list, tuple, set, frozenset)):
        return MetadataValue.array(raw)
    return MetadataValue.convertible(raw)


def _render(value: MetadataValue) -> str | None:
    if value.kind is ValueKind.STRING:
        return value.value
    if value.kind is ValueKind.STRING_CONVERTIBLE:
        try:
            return str(value.value)
        except Exception:
            logger.debug("Dropping metadata value of type %s: str() failed",
                         type(value.value).__name__)
            return None
    return None


def normalize(metadata: Mapping[str, Any] | None) -> list[MetadataEntry]:
    """Return one entry per retained key; the createdAt key is never kept."""
    if not metadata:
        return []
    # Keyed by the stored form: 1 and "1" collapse, last one wins.
    rendered: dict[str, str] = {}
    for key, raw in metadata.items():
        if key == CREATED_AT_KEY:
            continue
        text = _render(lift(raw))
        if text is not None:
            rendered.pop(str(key), None)
            rendered[str(key)] = text
    return [MetadataEntry(key=k, value=v) for k, v in rendered.items()]


def resolve_timestamp(metadata: Mapping[str, Any] | None, clock) -> datetime:
    """Use a datetime under CREATED_AT_KEY verbatim, else ask the clock."""
    if metadata and CREATED_AT_KEY in metadata:
        value = lift(metadata[CREATED_AT_KEY])
        if value.kind is ValueKind.STRING_CONVERTIBLE and isinstance(value.value, datetime):
            return value.value
    return clock()
