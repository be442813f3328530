"""In-process search and filter predicates over LogRecord."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .models import FilterKey, LogRecord
from .time_window import parse_timestamp


def _fold(value: Any) -> str:
    return str(value).casefold()


def _searchable_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)


def compare_values(record_value: Any, filter_value: Any) -> bool:
    """Strings compare case-insensitively; anything else needs same type and value."""
    if isinstance(record_value, str) and isinstance(filter_value, str):
        return record_value.casefold() == filter_value.casefold()
    return type(record_value) is type(filter_value) and record_value == filter_value


def matches_search(record: LogRecord, term: str) -> bool:
    """Case-insensitive substring match against message and context."""
    if not term:
        return False
    needle = term.casefold()
    return needle in record.message.casefold() or needle in _searchable_text(record.context).casefold()


def matches_property(record: LogRecord, key: str, value: Any) -> bool:
    """Match a record attribute, falling back to an `extra` entry."""
    present, current = record.get(key)
    if present:
        return compare_values(current, value)
    if key in record.extra:
        return compare_values(record.extra[key], value)
    return False


def matches_filter(record: LogRecord, key: str, value: Any) -> bool:
    """Decide whether one filter key/value accepts the record."""
    if key == FilterKey.LEVEL.value:
        return record.level.casefold() == _fold(value)
    if key == FilterKey.DATE_FROM.value:
        return record.timestamp >= parse_timestamp(value)
    if key == FilterKey.DATE_TO.value:
        return record.timestamp <= parse_timestamp(value)
    if key == FilterKey.CHANNEL.value:
        return record.channel is not None and record.channel.casefold() == _fold(value)
    return matches_property(record, key, value)


def matches_filters(record: LogRecord, filters: Mapping[str, Any]) -> bool:
    return all(matches_filter(record, key, value) for key, value in filters.items())


def build_predicate(
    *,
    search: str | None = None,
    filters: Mapping[str, Any] | None = None,
) -> Callable[[LogRecord], bool] | None:
    """Combine filters and search into one predicate (filters are checked first).

    Returns None when nothing restricts the records. An empty search term
    matches nothing.
    """
    filters = dict(filters or {})
    if search is None and not filters:
        return None

    # Resolve range bounds once instead of per record.
    bounds = {
        k: parse_timestamp(v)
        for k, v in filters.items()
        if k in (FilterKey.DATE_FROM.value, FilterKey.DATE_TO.value)
    }
    resolved = {k: bounds.get(k, v) for k, v in filters.items()}

    def predicate(record: LogRecord) -> bool:
        if not matches_filters(record, resolved):
            return False
        if search is not None:
            return matches_search(record, search)
        return True

    return predicate


def apply_predicates(
    records: Iterable[LogRecord],
    *,
    search: str | None = None,
    filters: Mapping[str, Any] | None = None,
) -> list[LogRecord]:
    predicate = build_predicate(search=search, filters=filters)
    if predicate is None:
        return list(records)
    return [r for r in records if predicate(r)]
