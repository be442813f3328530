"""Builder-style log reader over a file or table backend.

Example::

    reader = create_reader(settings)
    records = reader.filter({"level": "error"}).search("timeout").chunk().execute()

Each call returns a new reader; the backend always applies filters before the
search term, so the order of the calls does not matter.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import create_engine

from .config import LogDriver, LogReaderSettings, effective_limit
from .models import LogRecord
from .readers import FileLogReader, LogBackend, LogQuery, TableLogReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LogReader:
    """Immutable query builder bound to a backend."""

    backend: LogBackend
    query: LogQuery = field(default_factory=LogQuery)

    def search(self, term: str) -> LogReader:
        return LogReader(self.backend, self.query.with_search(term))

    def filter(self, filters: Mapping[str, Any] | None = None) -> LogReader:
        return LogReader(self.backend, self.query.with_filters(filters or {}))

    def chunk(self, chunk_size: int | None = None) -> LogReader:
        return LogReader(self.backend, self.query.with_chunk(chunk_size))

    def execute(self) -> list[LogRecord]:
        logger.debug("Executing %s on %s", self.query, type(self.backend).__name__)
        return self.backend.execute(self.query)


def create_backend(settings: LogReaderSettings) -> LogBackend:
    """Build the backend selected by ``settings.driver``."""
    driver = settings.driver
    if driver is LogDriver.FILE:
        return FileLogReader(
            path=settings.file.path,
            chunk_size=settings.file.chunk_size,
            limit=effective_limit(settings.file.limit),
        )
    if driver is LogDriver.DB:
        engine = create_engine(settings.connection_url())
        return TableLogReader(
            engine=engine,
            table=settings.db.table,
            columns=settings.db.column_mapping(),
            searchable_columns=settings.db.searchable_columns,
            chunk_size=settings.db.chunk_size,
            limit=effective_limit(settings.db.limit),
        )
    raise ValueError(f"Invalid log driver: {driver}")


def create_reader(settings: LogReaderSettings | None = None) -> LogReader:
    """Build a reader from settings (environment settings when omitted)."""
    settings = settings or LogReaderSettings.from_env()
    return LogReader(create_backend(settings))
