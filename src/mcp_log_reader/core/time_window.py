"""Timestamp parsing helpers.

Every timestamp the readers compare is resolved to a timezone-aware UTC datetime,
whatever shape the source used (log line text, naive DB value, ISO string).
"""

from __future__ import annotations

from datetime import UTC, date, datetime, tzinfo

_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


def normalize_ts(ts: datetime, *, default_tz: tzinfo = UTC) -> datetime:
    """Normalize timestamps to timezone-aware UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=default_tz)
    return ts.astimezone(UTC)


def parse_iso_dt(s: str) -> datetime:
    """Parse an ISO8601-ish datetime string. If tz is missing, assume UTC."""
    s = s.strip()
    for fmt in _FORMATS:
        try:
            return datetime.strptime(s, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"Unrecognized timestamp: {s!r}") from e
    return normalize_ts(dt)


def parse_timestamp(value: datetime | date | str) -> datetime:
    """Resolve a datetime, date or string into a UTC datetime."""
    if isinstance(value, datetime):
        return normalize_ts(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        return parse_iso_dt(value)
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def to_naive_utc(value: datetime | date | str) -> datetime:
    """UTC datetime without tzinfo, for comparison against naive DB columns."""
    return parse_timestamp(value).replace(tzinfo=None)
