"""Synchronous body of the `read_logs` MCP tool.

Resolves per-call backend overrides, builds a LogReader from settings and
returns the matching records as plain dicts, newest first.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mcp_log_reader.core.config import LogDriver, LogReaderSettings
from mcp_log_reader.core.reader import create_reader

DEFAULT_LIMIT = 200
HARD_LIMIT = 5000


def apply_overrides(
    settings: LogReaderSettings,
    *,
    driver: str | None = None,
    path: str | None = None,
    table: str | None = None,
) -> LogReaderSettings:
    """Return settings with per-call driver/path/table overrides applied."""
    update: dict[str, Any] = {}
    if driver:
        try:
            update["driver"] = LogDriver(driver.strip().lower())
        except ValueError as e:
            valid = ", ".join(d.value for d in LogDriver)
            raise ValueError(f"Invalid log driver: {driver}. Valid values: {valid}.") from e
    if path:
        update["file"] = settings.file.model_copy(update={"path": Path(path)})
    if table:
        update["db"] = settings.db.model_copy(update={"table": table})
    return settings.model_copy(update=update) if update else settings


def read_logs_impl(
    *,
    search: str | None = None,
    filters: Mapping[str, Any] | None = None,
    chunk: bool = False,
    chunk_size: int | None = None,
    limit: int | None = None,
    driver: str | None = None,
    path: str | None = None,
    table: str | None = None,
    settings: LogReaderSettings | None = None,
) -> dict[str, Any]:
    """Implementation for the `read_logs` MCP tool.

    Notes
    -----
    - Filters are applied before the search term.
    - An empty search string returns no entries; omit it to disable search.
    - `limit` caps the response size (hard-capped), independently of the
      backend's configured record cap.
    """
    if limit is None:
        limit = DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    if limit > HARD_LIMIT:
        limit = HARD_LIMIT
    if chunk_size is not None and chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")

    settings = apply_overrides(
        settings or LogReaderSettings.from_env(),
        driver=driver,
        path=path,
        table=table,
    )

    reader = create_reader(settings)
    if filters:
        reader = reader.filter(dict(filters))
    if search is not None:
        reader = reader.search(search)
    if chunk:
        reader = reader.chunk(chunk_size)

    records = reader.execute()
    entries = [r.to_dict() for r in records[:limit]]
    return {
        "driver": settings.driver.value,
        "count": len(entries),
        "truncated": len(records) > len(entries),
        "entries": entries,
    }
