from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from mcp_log_reader.core.config import (
    ColumnType,
    DbSettings,
    LogDriver,
    LogReaderSettings,
    effective_limit,
    load_settings,
)
from mcp_log_reader.core.models import LogField

ENV_VARS = (
    "LOG_READER_DRIVER",
    "LOG_FILE_PATH",
    "LOG_READER_FILE_CHUNK_SIZE",
    "LOG_READER_FILE_LIMIT",
    "LOG_DB_TABLE_NAME",
    "LOG_DB_CONNECTION",
    "LOG_READER_DB_CHUNK_SIZE",
    "LOG_READER_DB_QUERY_LIMIT",
    "LOG_READER_DATABASE_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = LogReaderSettings()

    assert s.driver is LogDriver.FILE
    assert s.file.path == Path("logs/app.log")
    assert s.file.chunk_size == 512 * 1024
    assert s.db.table == "logs"
    assert s.db.chunk_size == 500
    assert s.db.column_mapping().column(LogField.TIMESTAMP) == "timestamp"
    assert [c.name for c in s.db.searchable_columns] == [LogField.MESSAGE, LogField.CONTEXT, LogField.EXTRA]
    assert s.connection_url() == "sqlite:///logs.db"


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_READER_DRIVER", " DB ")
    monkeypatch.setenv("LOG_FILE_PATH", "/var/log/app/laravel.log")
    monkeypatch.setenv("LOG_READER_FILE_CHUNK_SIZE", "4096")
    monkeypatch.setenv("LOG_DB_TABLE_NAME", "app_logs")
    monkeypatch.setenv("LOG_DB_CONNECTION", "logging")
    monkeypatch.setenv("LOG_READER_DB_QUERY_LIMIT", "0")
    monkeypatch.setenv("LOG_READER_DATABASE_URL", "sqlite:///tmp/app.db")

    s = LogReaderSettings.from_env()

    assert s.driver is LogDriver.DB
    assert s.file.path == Path("/var/log/app/laravel.log")
    assert s.file.chunk_size == 4096
    assert s.db.table == "app_logs"
    assert s.db.limit == 0
    assert s.connection_url() == "sqlite:///tmp/app.db"


def test_from_env_bad_integer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_READER_DB_CHUNK_SIZE", "lots")
    with pytest.raises(ValueError, match="LOG_READER_DB_CHUNK_SIZE must be an integer"):
        LogReaderSettings.from_env()


def test_from_env_invalid_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_READER_DRIVER", "syslog")
    with pytest.raises(ValidationError):
        LogReaderSettings.from_env()


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        DbSettings(chunk_size=0)


def test_searchable_columns_accept_plain_names() -> None:
    db = DbSettings.model_validate({"searchable_columns": ["message", {"name": "extra", "type": "json"}]})

    assert db.searchable_columns[0].name is LogField.MESSAGE
    assert db.searchable_columns[0].type is ColumnType.TEXT
    assert db.searchable_columns[1].type is ColumnType.JSON


def test_load_settings_from_json_file(tmp_path: Path) -> None:
    path = tmp_path / "log-reader.json"
    path.write_text(
        json.dumps(
            {
                "driver": "db",
                "db": {"table": "monolog", "columns": {"timestamp": "datetime", "level_name": "level_name"}},
                "connections": {"default": "sqlite:///monolog.db"},
            }
        ),
        encoding="utf-8",
    )

    s = load_settings(path)

    assert s.driver is LogDriver.DB
    mapping = s.db.column_mapping()
    assert mapping.column("timestamp") == "datetime"
    assert mapping.column("message") == "message"
    assert mapping.level_name_column == "level_name"


def test_load_settings_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.json")


def test_load_settings_without_path_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_DB_TABLE_NAME", "audit_logs")
    assert load_settings().db.table == "audit_logs"


@pytest.mark.parametrize(("limit", "expected"), [(None, None), (0, None), (25, 25)])
def test_effective_limit(limit: int | None, expected: int | None) -> None:
    assert effective_limit(limit) == expected
