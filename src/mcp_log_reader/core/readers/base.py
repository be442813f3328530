"""Query and backend interfaces."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Protocol

from ..models import LogRecord


@dataclass(frozen=True, slots=True)
class LogQuery:
    """Finalized read request: search term, filters and chunking options.

    ``search=None`` means no search; ``search=""`` matches nothing.
    ``chunk_size=None`` with ``chunk=True`` uses the backend's configured size.
    """

    search: str | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)
    chunk: bool = False
    chunk_size: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))
        if self.chunk_size is not None and self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

    def with_search(self, term: str) -> LogQuery:
        return replace(self, search=term)

    def with_filters(self, filters: Mapping[str, Any]) -> LogQuery:
        merged = dict(self.filters)
        merged.update(filters)
        return replace(self, filters=merged)

    def with_chunk(self, chunk_size: int | None = None) -> LogQuery:
        return replace(self, chunk=True, chunk_size=chunk_size)


class LogBackend(Protocol):
    """Backend interface: run a finalized query, newest records first."""

    def execute(self, query: LogQuery) -> list[LogRecord]:
        ...
