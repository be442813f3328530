"""File-backed log reader."""

from __future__ import annotations

import gzip
import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..models import LogRecord, order_newest_first
from ..parser import FileLogParser
from ..predicates import apply_predicates, build_predicate
from ..scanning import DEFAULT_CHUNK_SIZE, ChunkedFileScanner
from .base import LogQuery

logger = logging.getLogger(__name__)


def _read_text(path: Path, *, encoding: str, decode_errors: str) -> str:
    """Read a whole log file (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors) as f:
            return f.read()
    return path.read_text(encoding=encoding, errors=decode_errors)


@dataclass(frozen=True, slots=True)
class FileLogReader:
    """Search and filter a Monolog-format log file."""

    path: Path
    chunk_size: int = DEFAULT_CHUNK_SIZE
    limit: int | None = None
    encoding: str = "utf-8"
    decode_errors: str = "replace"
    parser: FileLogParser = field(default_factory=FileLogParser)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))

    def read_all(self) -> list[LogRecord]:
        """Parse the whole file, most recent first; unreadable files give []."""
        if not self.path.is_file():
            logger.warning("Log file not found: %s", self.path)
            return []
        try:
            content = _read_text(self.path, encoding=self.encoding, decode_errors=self.decode_errors)
        except OSError as e:
            logger.warning("Cannot read log file %s: %s", self.path, e)
            return []
        return self.parser.parse(content)

    def execute(self, query: LogQuery) -> list[LogRecord]:
        if query.search == "":
            return []
        limit = self.limit if self.limit else None

        if query.chunk:
            scanner = ChunkedFileScanner(
                chunk_size=query.chunk_size or self.chunk_size,
                encoding=self.encoding,
                decode_errors=self.decode_errors,
            )
            predicate = build_predicate(search=query.search, filters=query.filters)
            matches = scanner.scan(self.path, predicate, limit=limit)
            matches.reverse()
            return order_newest_first(matches)

        records = apply_predicates(self.read_all(), search=query.search, filters=query.filters)
        records = order_newest_first(records)
        return records[:limit] if limit is not None else records
