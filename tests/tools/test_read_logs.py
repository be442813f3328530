from __future__ import annotations

from pathlib import Path

import pytest

from mcp_log_reader.core.config import LogDriver, LogReaderSettings
from mcp_log_reader.prompts.registry import build_investigate_prompt
from mcp_log_reader.tools.read_logs import HARD_LIMIT, apply_overrides, read_logs_impl


def _file_settings(path: Path) -> LogReaderSettings:
    return LogReaderSettings.model_validate({"driver": "file", "file": {"path": str(path)}})


def test_read_logs_impl_filters_and_searches(app_log: Path) -> None:
    out = read_logs_impl(
        search="undefined method",
        filters={"level": "error"},
        settings=_file_settings(app_log),
    )

    assert out["driver"] == "file"
    assert out["count"] == 1
    assert out["truncated"] is False
    entry = out["entries"][0]
    assert entry["level"] == "ERROR"
    assert entry["timestamp"] == "2025-09-28 12:05:00"
    assert entry["context"].startswith("Stack trace:")
    assert "id" not in entry


def test_read_logs_impl_chunked_matches_unchunked(app_log: Path) -> None:
    settings = _file_settings(app_log)
    plain = read_logs_impl(filters={"channel": "local"}, settings=settings)
    chunked = read_logs_impl(filters={"channel": "local"}, chunk=True, chunk_size=16, settings=settings)

    assert chunked == plain
    assert plain["count"] == 3


def test_read_logs_impl_limit_truncates(app_log: Path) -> None:
    out = read_logs_impl(limit=2, settings=_file_settings(app_log))

    assert out["count"] == 2
    assert out["truncated"] is True
    assert [e["level"] for e in out["entries"]] == ["WARNING", "DEBUG"]


def test_read_logs_impl_empty_search(app_log: Path) -> None:
    out = read_logs_impl(search="", settings=_file_settings(app_log))
    assert out["count"] == 0
    assert out["entries"] == []


def test_read_logs_impl_path_override(tmp_path: Path, app_log: Path) -> None:
    settings = _file_settings(tmp_path / "other.log")
    out = read_logs_impl(path=str(app_log), settings=settings)
    assert out["count"] == 4


def test_read_logs_impl_db_driver(tmp_path: Path, engine, log_columns: dict[str, str]) -> None:
    settings = LogReaderSettings.model_validate(
        {
            "db": {"columns": log_columns},
            "connections": {"default": f"sqlite:///{tmp_path / 'logs.db'}"},
        }
    )

    out = read_logs_impl(driver="db", table="logs", search="payment", settings=settings)

    assert out["driver"] == "db"
    assert [e["id"] for e in out["entries"]] == ["2"]
    assert out["entries"][0]["extra"] == {"user_id": 2}


@pytest.mark.parametrize(("kwargs", "message"), [({"limit": 0}, "limit"), ({"chunk_size": 0}, "chunk_size")])
def test_read_logs_impl_rejects_bad_sizes(app_log: Path, kwargs: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        read_logs_impl(settings=_file_settings(app_log), **kwargs)


def test_read_logs_impl_caps_limit(tmp_path: Path) -> None:
    lines = "".join(f"[2025-09-28 12:00:00] local.INFO: line {i}\n" for i in range(HARD_LIMIT + 5))
    path = tmp_path / "big.log"
    path.write_text(lines, encoding="utf-8")

    out = read_logs_impl(limit=HARD_LIMIT + 100, settings=_file_settings(path))

    assert out["count"] == HARD_LIMIT
    assert out["truncated"] is True


def test_apply_overrides() -> None:
    base = LogReaderSettings()
    s = apply_overrides(base, driver=" DB ", path="/tmp/x.log", table="audit")

    assert s.driver is LogDriver.DB
    assert s.file.path == Path("/tmp/x.log")
    assert s.db.table == "audit"
    assert base.driver is LogDriver.FILE
    assert apply_overrides(base) is base


def test_apply_overrides_invalid_driver() -> None:
    with pytest.raises(ValueError, match="Invalid log driver"):
        apply_overrides(LogReaderSettings(), driver="syslog")


def test_investigate_prompt_lists_filters() -> None:
    messages = build_investigate_prompt(level="ERROR", channel="payment", date_from="2025-09-28", search="timeout")

    assert [m["role"] for m in messages] == ["system", "user"]
    body = messages[1]["content"]
    assert '"level": "error"' in body
    assert '"channel": "payment"' in body
    assert '"date_from": "2025-09-28"' in body
    assert "date_to" not in body
    assert "search: timeout" in body
