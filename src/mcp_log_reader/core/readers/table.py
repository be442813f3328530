"""Database-table log reader (SQLAlchemy Core).

Search and filters are pushed down into a single SELECT against the reflected
table; rows are converted into LogRecord via the configured column mapping.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Engine, Integer, MetaData, Select, Table, Text, and_, cast, false, func, or_, select
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.sql.elements import ColumnElement

from ..columns import ColumnMapping
from ..config import ColumnType, DbSettings, SearchableColumn
from ..models import FilterKey, LogField, LogLevel, LogRecord
from ..time_window import to_naive_utc
from .base import LogQuery

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True, slots=True)
class TableLogReader:
    """Search and filter a log table."""

    engine: Engine
    table: str = "logs"
    columns: ColumnMapping = field(default_factory=ColumnMapping)
    searchable_columns: Sequence[SearchableColumn] = field(
        default_factory=lambda: DbSettings().searchable_columns
    )
    chunk_size: int = 500
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

    def execute(self, query: LogQuery) -> list[LogRecord]:
        if query.search == "":
            return []
        limit = self.limit if self.limit else None

        with self.engine.connect() as conn:
            table = self._reflect(conn)
            stmt = self._apply_order(table, self._apply_filters(table, select(table), query.filters))
            if query.search is not None:
                stmt = self._apply_search(table, stmt, query.search)

            if query.chunk:
                rows = self._fetch_pages(conn, stmt, page_size=query.chunk_size or self.chunk_size, limit=limit)
            else:
                if limit is not None:
                    stmt = stmt.limit(limit)
                rows = list(conn.execute(stmt).mappings())

        return [self._to_record(row) for row in rows]

    def _reflect(self, conn: Connection) -> Table:
        """Load the current table schema (columns are checked per query)."""
        return Table(self.table, MetaData(), autoload_with=conn)

    def _required(self, table: Table, name: LogField | str) -> ColumnElement[Any]:
        col = self.columns.column(name)
        if col not in table.c:
            raise ValueError(f"Column '{col}' not found in table '{self.table}'")
        return table.c[col]

    def _level_clause(self, table: Table, value: Any) -> ColumnElement[bool]:
        """Match a level the way `_to_record` resolves it: name column first, then the level column."""
        name = str(value).strip().lower()
        name_col = self.columns.level_name_column
        has_name_col = bool(name_col) and name_col in table.c
        level_key = self.columns.column(LogField.LEVEL)
        if has_name_col and level_key not in table.c:
            return func.lower(table.c[name_col]) == name

        level_col = self._required(table, LogField.LEVEL)
        if isinstance(level_col.type, Integer):
            # Numeric Monolog severity; unknown names cannot match any code.
            code = LogLevel.code_for(name)
            by_level = level_col == code if code else false()
        else:
            by_level = func.lower(level_col) == name

        if not has_name_col:
            return by_level
        name_expr = table.c[name_col]
        return or_(func.lower(name_expr) == name, and_(name_expr.is_(None), by_level))

    def _apply_filters(self, table: Table, stmt: Select, filters: Mapping[str, Any]) -> Select:
        for key, value in filters.items():
            if key == FilterKey.LEVEL.value:
                stmt = stmt.where(self._level_clause(table, value))
            elif key == FilterKey.DATE_FROM.value:
                stmt = stmt.where(self._required(table, LogField.TIMESTAMP) >= to_naive_utc(value))
            elif key == FilterKey.DATE_TO.value:
                stmt = stmt.where(self._required(table, LogField.TIMESTAMP) <= to_naive_utc(value))
            elif key == FilterKey.CHANNEL.value:
                stmt = stmt.where(func.lower(self._required(table, LogField.CHANNEL)) == str(value).lower())
            else:
                col = self.columns.column(key)
                if col in table.c:
                    stmt = stmt.where(table.c[col] == value)
                else:
                    logger.debug("Ignoring filter %r: no column %r in %s", key, col, self.table)
        return stmt

    def _apply_search(self, table: Table, stmt: Select, term: str) -> Select:
        pattern = f"%{_escape_like(term.lower())}%"
        clauses = []
        for searchable in self.searchable_columns:
            col = self.columns.column(searchable.name)
            if col not in table.c:
                logger.debug("Searchable column %r missing from %s", col, self.table)
                continue
            expr = table.c[col]
            if searchable.type is ColumnType.JSON:
                expr = cast(expr, Text)
            clauses.append(func.lower(expr).like(pattern, escape=_LIKE_ESCAPE))
        return stmt.where(or_(*clauses) if clauses else false())

    def _apply_order(self, table: Table, stmt: Select) -> Select:
        stmt = stmt.order_by(self._required(table, LogField.TIMESTAMP).desc())
        id_col = self.columns.column(LogField.ID)
        if id_col in table.c:
            stmt = stmt.order_by(table.c[id_col].asc())
        return stmt

    def _fetch_pages(
        self,
        conn: Connection,
        stmt: Select,
        *,
        page_size: int,
        limit: int | None,
    ) -> list[RowMapping]:
        """Fetch rows one page per query until a short page or the cap."""
        rows: list[RowMapping] = []
        offset = 0
        while True:
            size = page_size if limit is None else min(page_size, limit - len(rows))
            if size <= 0:
                break
            page = list(conn.execute(stmt.limit(size).offset(offset)).mappings())
            rows.extend(page)
            logger.debug("Fetched page offset=%d rows=%d from %s", offset, len(page), self.table)
            if len(page) < size:
                break
            offset += size
        return rows

    def _to_record(self, row: RowMapping) -> LogRecord:
        data: dict[str, Any] = {}
        for f in LogField:
            col = self.columns.column(f)
            if col in row:
                data[f.value] = row[col]

        name_col = self.columns.level_name_column
        if name_col and name_col in row and row[name_col] is not None:
            data[LogField.LEVEL.value] = row[name_col]
        else:
            level = data.get(LogField.LEVEL.value)
            if isinstance(level, int) and not isinstance(level, bool):
                known = LogLevel.from_code(level)
                data[LogField.LEVEL.value] = known.value if known is not None else str(level)

        return LogRecord.from_row(data)
