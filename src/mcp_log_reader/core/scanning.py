"""Bounded-memory scanning of large log files.

The file is read in fixed-size byte windows. Each window is cut at its last line
terminator so no line is ever split; the tail is carried into the next read.
"""

from __future__ import annotations

import gzip
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .models import LogRecord
from .parser import ParseSession

logger = logging.getLogger(__name__)

RecordPredicate = Callable[[LogRecord], bool]

DEFAULT_CHUNK_SIZE = 512 * 1024


@contextmanager
def open_binary(path: Path) -> Iterator[BinaryIO]:
    """Open a log file for binary reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rb") as f:
            yield f
    else:
        with path.open("rb") as f:
            yield f


def iter_content_chunks(f: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    """Yield content chunks that end on a line boundary (except possibly the last)."""
    buffer = b""
    while True:
        block = f.read(chunk_size)
        if not block:
            break
        buffer += block
        cut = buffer.rfind(b"\n")
        if cut == -1:
            # No complete line yet: keep growing the buffer.
            continue
        chunk, buffer = buffer[: cut + 1], buffer[cut + 1 :]
        yield chunk
    if buffer:
        yield buffer


@dataclass(frozen=True, slots=True)
class ChunkedFileScanner:
    """Parse a file window by window and keep the records a predicate accepts."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    encoding: str = "utf-8"
    decode_errors: str = "replace"

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

    def scan(
        self,
        log_path: str | Path,
        predicate: RecordPredicate | None = None,
        *,
        limit: int | None = None,
    ) -> list[LogRecord]:
        """Return matching records in file order.

        Scanning stops as soon as `limit` matches were collected. A file that
        cannot be opened yields an empty list.
        """
        path = Path(log_path)
        if limit is not None and limit <= 0:
            limit = None

        matches: list[LogRecord] = []
        session = ParseSession()
        windows = 0
        try:
            with open_binary(path) as f:
                for chunk in iter_content_chunks(f, self.chunk_size):
                    windows += 1
                    text = chunk.decode(self.encoding, errors=self.decode_errors)
                    if self._collect(session.feed(text), predicate, matches, limit):
                        logger.debug("Limit %s reached after %d windows", limit, windows)
                        return matches
        except OSError as e:
            logger.warning("Cannot read log file %s: %s", path, e)
            return []

        self._collect(session.close(), predicate, matches, limit)
        logger.debug("Scanned %s in %d windows, %d matches", path, windows, len(matches))
        return matches

    @staticmethod
    def _collect(
        records: list[LogRecord],
        predicate: RecordPredicate | None,
        out: list[LogRecord],
        limit: int | None,
    ) -> bool:
        """Append accepted records; return True once `limit` is reached."""
        for record in records:
            if predicate is not None and not predicate(record):
                continue
            out.append(record)
            if limit is not None and len(out) >= limit:
                return True
        return False
