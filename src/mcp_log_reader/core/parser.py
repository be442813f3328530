"""Parser for Monolog-style log files.

Entry head lines look like::

    [2025-09-28 12:05:00] production.ERROR: Something failed {"user_id":1}

Lines that follow a head line (stack traces, dumped payloads) belong to that entry
and are collected verbatim as its context.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .models import LogField, LogRecord
from .time_window import parse_timestamp

logger = logging.getLogger(__name__)

HEAD_RE = re.compile(
    r"^\[(?P<ts>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\] "
    r"(?P<channel>\w+)\.(?P<level>\w+): "
    r"(?P<msg>.+)",
    re.ASCII,
)


def match_head(line: str) -> tuple[datetime, str, str, str] | None:
    """Return (timestamp, channel, LEVEL, message) when `line` starts an entry."""
    m = HEAD_RE.match(line.rstrip("\r\n"))
    if not m:
        return None
    try:
        ts = parse_timestamp(m.group("ts"))
    except ValueError:
        # Digits in the right places but not a real date (e.g. month 13).
        return None
    return ts, m.group("channel"), m.group("level").upper(), m.group("msg")


@dataclass(slots=True)
class ParseSession:
    """Incremental parser state.

    ``feed`` accepts arbitrary pieces of the file in order and returns the entries
    that became complete; ``close`` flushes the last one. Output is in file order.
    """

    _current: dict[str, Any] | None = None
    _context: list[str] = field(default_factory=list)
    _partial: str = ""

    def feed(self, text: str) -> list[LogRecord]:
        if not text:
            return []
        pieces = (self._partial + text).split("\n")
        self._partial = pieces.pop()
        out: list[LogRecord] = []
        for line in pieces:
            record = self._consume(line, "\n")
            if record is not None:
                out.append(record)
        return out

    def close(self) -> list[LogRecord]:
        out: list[LogRecord] = []
        if self._partial:
            line, self._partial = self._partial, ""
            record = self._consume(line, "")
            if record is not None:
                out.append(record)
        record = self._finalize()
        if record is not None:
            out.append(record)
        return out

    def _consume(self, line: str, terminator: str) -> LogRecord | None:
        head = match_head(line)
        if head is None:
            if self._current is not None:
                self._context.append(line + terminator)
            return None

        done = self._finalize()
        ts, channel, level, message = head
        self._current = {
            LogField.TIMESTAMP.value: ts,
            LogField.CHANNEL.value: channel,
            LogField.LEVEL.value: level,
            LogField.MESSAGE.value: message,
        }
        return done

    def _finalize(self) -> LogRecord | None:
        if self._current is None:
            return None
        entry = self._current
        entry[LogField.CONTEXT.value] = "".join(self._context).rstrip()
        self._current = None
        self._context = []
        return LogRecord.from_file(entry)


@dataclass(frozen=True, slots=True)
class FileLogParser:
    """Turn log file text into records, most recent first."""

    def parse(self, content: str) -> list[LogRecord]:
        if not content:
            return []
        session = ParseSession()
        records = session.feed(content)
        records.extend(session.close())
        records.reverse()
        logger.debug("Parsed %d log entries", len(records))
        return records
