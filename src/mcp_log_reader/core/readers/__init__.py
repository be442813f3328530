"""Log backends (file and database table) behind one query interface."""

from __future__ import annotations

from .base import LogBackend, LogQuery
from .file import FileLogReader
from .table import TableLogReader

__all__ = [
    "FileLogReader",
    "LogBackend",
    "LogQuery",
    "TableLogReader",
]
