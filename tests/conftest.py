from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import Column, DateTime, Engine, Integer, MetaData, String, Table, Text, create_engine

from mcp_log_reader.core.columns import ColumnMapping

APP_LOG = "\n".join(
    [
        '[2025-09-28 12:00:00] local.INFO: User authentication successful {"user_id":123,"ip":"193.167.1.1"}',
        "[2025-09-28 12:05:00] local.ERROR: Call to undefined method App\\Models\\User::nonExistentMethod() "
        '{"exception":"[object] (BadMethodCallException(code: 0) at /var/www/html/app/Http/Controllers/UserController.php:25)',
        "Stack trace:",
        "#0 /var/www/html/app/Http/Controllers/UserController.php(25): Illuminate\\Database\\Eloquent\\Model::__call()",
        "#1 /var/www/html/vendor/laravel/framework/src/Illuminate/Routing/Controller.php(54): show()",
        "#2 /var/www/html/vendor/laravel/framework/src/Illuminate/Routing/ControllerDispatcher.php(43): callAction()",
        '#3 {main}","user_id":456}',
        '[2025-09-28 12:10:00] local.DEBUG: Database query executed {"query":"SELECT * FROM users","time":45.67}',
        '[2025-09-28 12:15:00] production.WARNING: Queue job failed {"job":"SendEmailJob","attempts":3}',
    ]
)

LOG_COLUMNS = {
    "id": "id",
    "level": "level",
    "message": "message",
    "timestamp": "created_at",
    "channel": "channel",
    "context": "context",
    "extra": "extra",
}


@pytest.fixture
def write_app_log() -> Callable[[Path], Path]:
    def _write(path: Path) -> Path:
        path.write_text(APP_LOG, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def app_log(tmp_path: Path, write_app_log) -> Path:
    return write_app_log(tmp_path / "app.log")


@pytest.fixture
def logs_table() -> Table:
    return Table(
        "logs",
        MetaData(),
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("level", String(20)),
        Column("message", Text),
        Column("channel", String(50)),
        Column("context", Text),
        Column("extra", Text),
        Column("created_at", DateTime),
    )


@pytest.fixture
def engine(tmp_path: Path, logs_table: Table) -> Iterator[Engine]:
    eng = create_engine(f"sqlite:///{tmp_path / 'logs.db'}")
    logs_table.metadata.create_all(eng)
    with eng.begin() as conn:
        conn.execute(
            logs_table.insert(),
            [
                {
                    "level": "info",
                    "message": "User logged in",
                    "channel": "auth",
                    "context": '{"action":"login"}',
                    "extra": '{"user_id":1}',
                    "created_at": datetime(2025, 9, 28, 12, 0, 0),
                },
                {
                    "level": "error",
                    "message": "Payment failed",
                    "channel": "payment",
                    "context": "{}",
                    "extra": '{"user_id":2}',
                    "created_at": datetime(2025, 9, 28, 12, 5, 0),
                },
                {
                    "level": "debug",
                    "message": "Cache cleared",
                    "channel": "system",
                    "context": "{}",
                    "extra": "{}",
                    "created_at": datetime(2025, 9, 28, 12, 10, 0),
                },
            ],
        )
    yield eng
    eng.dispose()


@pytest.fixture
def insert_rows(engine: Engine, logs_table: Table) -> Callable[[list[dict]], None]:
    def _insert(rows: list[dict]) -> None:
        with engine.begin() as conn:
            conn.execute(logs_table.insert(), rows)

    return _insert


@pytest.fixture
def columns() -> ColumnMapping:
    return ColumnMapping.from_config(LOG_COLUMNS)


@pytest.fixture
def app_log_text() -> str:
    return APP_LOG


@pytest.fixture
def log_columns() -> dict[str, str]:
    return dict(LOG_COLUMNS)
