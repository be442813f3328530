"""Core data models for log reading."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .time_window import parse_timestamp

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(str, Enum):
    """Monolog severity names."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    NOTICE = "NOTICE"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    ALERT = "ALERT"
    EMERGENCY = "EMERGENCY"

    @property
    def code(self) -> int:
        return _LEVEL_CODES[self]

    @classmethod
    def code_for(cls, name: str | None) -> int:
        """Return the numeric severity for a level name (0 when unknown)."""
        if not name:
            return 0
        try:
            return cls(name.strip().upper()).code
        except ValueError:
            return 0

    @classmethod
    def from_code(cls, code: int) -> LogLevel | None:
        for level, value in _LEVEL_CODES.items():
            if value == code:
                return level
        return None


_LEVEL_CODES: dict[LogLevel, int] = {
    LogLevel.DEBUG: 100,
    LogLevel.INFO: 200,
    LogLevel.NOTICE: 250,
    LogLevel.WARNING: 300,
    LogLevel.ERROR: 400,
    LogLevel.CRITICAL: 500,
    LogLevel.ALERT: 550,
    LogLevel.EMERGENCY: 600,
}


class LogField(str, Enum):
    """Logical record fields, independent of physical column names."""

    ID = "id"
    LEVEL = "level"
    MESSAGE = "message"
    TIMESTAMP = "timestamp"
    CHANNEL = "channel"
    CONTEXT = "context"
    EXTRA = "extra"


class FilterKey(str, Enum):
    """Filter keys with dedicated comparison semantics."""

    LEVEL = "level"
    DATE_FROM = "date_from"
    DATE_TO = "date_to"
    CHANNEL = "channel"


def decode_extra(value: Any) -> dict[str, Any]:
    """Normalize an `extra` payload into a mapping; never raises."""
    if value is None:
        return {}
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return dict(value) if isinstance(value, Mapping) else {}


def decode_context(value: Any) -> dict[str, Any] | list[Any] | str | None:
    """Decode a JSON object/array context; anything else stays as given."""
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return value
    s = value.strip()
    if not (s.startswith("{") or s.startswith("[")):
        return value
    try:
        decoded = json.loads(s)
    except ValueError:
        return value
    return decoded if isinstance(decoded, (dict, list)) else value


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Normalized log record shared by the file and table backends."""

    level: str
    message: str
    timestamp: datetime  # always timezone-aware UTC
    id: str | None = None  # absent for file records
    channel: str | None = None
    context: dict[str, Any] | list[Any] | str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def level_code(self) -> int:
        return LogLevel.code_for(self.level)

    def get(self, name: str) -> tuple[bool, Any]:
        """Look up a known attribute by logical name.

        Returns ``(present, value)``; unknown names and absent values are not present.
        """
        try:
            f = LogField(name)
        except ValueError:
            return False, None
        value = getattr(self, f.value)
        return value is not None, value

    @classmethod
    def from_file(cls, entry: Mapping[str, Any]) -> LogRecord:
        """Create a record from a parsed file entry."""
        return cls(
            level=str(entry[LogField.LEVEL.value]).upper(),
            message=entry[LogField.MESSAGE.value],
            timestamp=parse_timestamp(entry[LogField.TIMESTAMP.value]),
            channel=entry.get(LogField.CHANNEL.value) or None,
            context=entry.get(LogField.CONTEXT.value, ""),
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> LogRecord:
        """Create a record from a row keyed by logical field names."""
        row_id = row.get(LogField.ID.value)
        channel = row.get(LogField.CHANNEL.value)
        ts = row.get(LogField.TIMESTAMP.value)
        return cls(
            id=str(row_id) if row_id is not None else None,
            level=str(row.get(LogField.LEVEL.value) or "").upper(),
            message=str(row.get(LogField.MESSAGE.value) or ""),
            timestamp=parse_timestamp(ts) if ts is not None else datetime.now(UTC),
            channel=str(channel) if channel is not None else None,
            context=decode_context(row.get(LogField.CONTEXT.value, "")),
            extra=decode_extra(row.get(LogField.EXTRA.value)),
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable dict without absent fields."""
        d: dict[str, Any] = {
            LogField.ID.value: self.id,
            LogField.LEVEL.value: self.level,
            LogField.MESSAGE.value: self.message,
            LogField.TIMESTAMP.value: self.timestamp.strftime(TIMESTAMP_FORMAT),
            LogField.CHANNEL.value: self.channel,
            LogField.CONTEXT.value: self.context,
            LogField.EXTRA.value: self.extra,
        }
        return {k: v for k, v in d.items() if v is not None}


def order_newest_first(records: Iterable[LogRecord]) -> list[LogRecord]:
    """Sort by timestamp descending; equal timestamps keep their relative order."""
    return sorted(records, key=lambda r: r.timestamp, reverse=True)
