"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_reader.core.config import LogReaderSettings
from mcp_log_reader.core.models import FilterKey, LogLevel

SAMPLE_LOG = (
    "[2025-09-28 12:00:00] local.INFO: User authentication successful {\"user_id\":123}\n"
    "[2025-09-28 12:05:00] local.ERROR: Call to undefined method App\\Models\\User::missing()\n"
    "Stack trace:\n"
    "#0 /var/www/html/app/Http/Controllers/UserController.php(25): show()\n"
    "#1 {main}\n"
    "[2025-09-28 12:10:00] local.DEBUG: Database query executed {\"time\":45.67}\n"
    "[2025-09-28 12:15:00] production.WARNING: Queue job failed {\"attempts\":3}\n"
)


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://log-reader/help")
    def help_resource() -> str:
        """Return a short description of the reader and its filters."""
        keys = ", ".join(k.value for k in FilterKey)
        levels = ", ".join(lvl.value.lower() for lvl in LogLevel)
        return (
            "Resources:\n"
            "- app://log-reader/help\n"
            "- app://log-reader/config\n"
            "- app://log-reader/schemas/settings\n"
            "- app://log-reader/examples/sample-log\n"
            "\nTool read_logs(search, filters, chunk, chunk_size, limit, driver, path, table)\n"
            f"Dedicated filter keys: {keys}; any other key matches a column or extra field.\n"
            f"Levels: {levels}\n"
        )

    @mcp.resource("app://log-reader/config")
    def config_resource() -> dict[str, Any]:
        """Return the effective settings (connection URLs omitted)."""
        data = LogReaderSettings.from_env().model_dump(mode="json")
        data["connections"] = sorted(data.get("connections", {}))
        return data

    @mcp.resource("app://log-reader/schemas/settings")
    def settings_schema() -> dict[str, Any]:
        """Return the JSON schema for reader settings files."""
        return LogReaderSettings.model_json_schema()

    @mcp.resource("app://log-reader/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny sample log in the supported file format."""
        return SAMPLE_LOG
