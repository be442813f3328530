"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def build_investigate_prompt(
    level: str = "error",
    channel: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    search: str | None = None,
) -> list[dict[str, Any]]:
    """Build the message list for the `investigate_errors` prompt."""
    filter_lines = [f'- "level": "{level.strip().lower()}"']
    if channel:
        filter_lines.append(f'- "channel": "{channel}"')
    if date_from:
        filter_lines.append(f'- "date_from": "{date_from}"')
    if date_to:
        filter_lines.append(f'- "date_to": "{date_to}"')
    call_lines = ["- filters:", *("  " + line for line in filter_lines)]
    if search:
        call_lines.append(f"- search: {search}")
    call_block = "\n".join(call_lines)

    return [
        {
            "role": "system",
            "content": (
                "You are a senior incident triage assistant for backend services. "
                "Provide concise, evidence-based summaries from log data. "
                "Do not invent details; if the evidence is insufficient, say so."
            ),
        },
        {
            "role": "user",
            "content": (
                "Investigate recent application errors using read_logs. Follow this workflow:\n"
                "- Call read_logs first with the parameters below.\n"
                "- Entries come back newest first; the context field holds stack traces.\n"
                "- If no entries are returned, say so and suggest widening the date range "
                "or dropping the channel filter.\n"
                "- Use only tool output for evidence; do not fabricate lines.\n\n"
                "Call read_logs with:\n"
                f"{call_block}\n\n"
                "Return this structure:\n"
                "1) What happened (1-3 bullets)\n"
                "2) Evidence (2-5 entries with timestamp, channel and message)\n"
                "3) Suspected root cause (1-2 sentences; say 'Unknown' if unclear)\n"
                "4) Next actions (2-4 bullets)\n"
            ),
        },
    ]


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def investigate_errors(
        level: str = "error",
        channel: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt that investigates error entries."""
        return build_investigate_prompt(
            level=level,
            channel=channel,
            date_from=date_from,
            date_to=date_to,
            search=search,
        )
