from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from typing import Any

from mcp_log_reader.core.config import load_settings
from mcp_log_reader.core.models import LogRecord
from mcp_log_reader.core.reader import create_reader
from mcp_log_reader.server.log_server import configure_logging
from mcp_log_reader.tools.read_logs import apply_overrides


def _parse_filter(s: str) -> tuple[str, Any]:
    key, sep, raw = s.partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError("filter must look like KEY=VALUE (e.g., level=error)")
    # Numbers/booleans are matched as such, so user_id=42 finds {"user_id": 42}.
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw
    if isinstance(value, (dict, list)) or value is None:
        value = raw
    return key, value


def _format_record(r: LogRecord) -> str:
    ts = r.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    channel = f"{r.channel}." if r.channel else ""
    line = f"[{ts}] {channel}{r.level}: {r.message}"
    if isinstance(r.context, str) and r.context:
        line += "\n" + r.context
    elif r.context:
        line += " " + json.dumps(r.context, ensure_ascii=False, default=str)
    return line


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Search and filter application logs (file or DB table).")
    p.add_argument("--config", default=None, help="JSON settings file (default: environment variables)")
    p.add_argument("--driver", choices=["file", "db"], default=None, help="Override the configured backend")
    p.add_argument("--path", default=None, help="Log file path (file driver)")
    p.add_argument("--table", default=None, help="Log table name (db driver)")
    p.add_argument("--search", default=None, help="Case-insensitive substring of message/context")
    p.add_argument(
        "--filter",
        dest="filters",
        action="append",
        type=_parse_filter,
        default=[],
        metavar="KEY=VALUE",
        help="Repeatable. Keys: level, channel, date_from, date_to, or any column/extra field",
    )
    p.add_argument(
        "--chunk",
        nargs="?",
        const=0,
        type=int,
        default=None,
        metavar="SIZE",
        help="Read in chunks (bytes for files, rows for tables); SIZE defaults to the configured value",
    )
    p.add_argument("--max", dest="max_results", type=int, default=None, help="Max results to print (default: no cap)")
    p.add_argument("--json", dest="as_json", action="store_true", help="Print entries as JSON lines")
    return p


def main(argv: Sequence[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    configure_logging()

    try:
        settings = apply_overrides(
            load_settings(args.config),
            driver=args.driver,
            path=args.path,
            table=args.table,
        )
        reader = create_reader(settings)
        if args.filters:
            reader = reader.filter(dict(args.filters))
        if args.search is not None:
            reader = reader.search(args.search)
        if args.chunk is not None:
            reader = reader.chunk(args.chunk or None)
        records = reader.execute()
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    if args.max_results is not None:
        records = records[: max(args.max_results, 0)]

    for r in records:
        if args.as_json:
            print(json.dumps(r.to_dict(), ensure_ascii=False, default=str))
        else:
            print(_format_record(r))

    if not args.as_json:
        print(f"\nFound {len(records)} matching entries.")


if __name__ == "__main__":
    main()
