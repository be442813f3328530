"""FastMCP app for the log reader.

Exposes `read_logs` over stdio together with the `app://log-reader/*` resources
and the `investigate_errors` prompt. Started by the `mcp-log-reader` script or
`python -m mcp_log_reader`.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_reader.prompts.registry import register_prompts
from mcp_log_reader.resources.registry import register_resources
from mcp_log_reader.tools.read_logs import read_logs_impl

LOGGER = logging.getLogger(__name__)


def configure_logging() -> None:
    """Send log output to stderr at LOG_READER_LOG_LEVEL (default INFO).

    stdout carries the MCP stdio protocol, so nothing else may write there.
    """
    level_name = os.getenv("LOG_READER_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("log-reader", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def read_logs(
    search: str | None = None,
    filters: dict[str, Any] | None = None,
    chunk: bool = False,
    chunk_size: int | None = None,
    limit: int | None = None,
    driver: str | None = None,
    path: str | None = None,
    table: str | None = None,
) -> dict[str, Any]:
    """Search and filter application logs from a log file or a log table.

    Parameters
    ----------
    search:
        Case-insensitive substring matched against message and context.
        Omit to disable search; an empty string returns nothing.
    filters:
        Mapping of filter key to value. `level` and `channel` match
        case-insensitively, `date_from`/`date_to` are inclusive bounds
        (e.g. "2025-09-28 12:05:00"). Other keys match a column (db) or a
        record/extra field (file).
    chunk:
        Read in bounded-memory windows (file) or pages (db).
    chunk_size:
        Bytes per window (file) or rows per page (db); configured default when omitted.
    limit:
        Maximum number of entries returned (hard-capped in the implementation).
    driver/path/table:
        Per-call overrides of the configured backend, log file path and table name.

    Returns
    -------
    dict:
        {"driver": str, "count": int, "truncated": bool, "entries": list[dict]}
    """
    return await asyncio.to_thread(
        read_logs_impl,
        search=search,
        filters=filters,
        chunk=chunk,
        chunk_size=chunk_size,
        limit=limit,
        driver=driver,
        path=path,
        table=table,
    )


def main() -> None:
    """Start the MCP server over stdio."""
    configure_logging()
    LOGGER.debug("Starting log-reader MCP server on stdio")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
