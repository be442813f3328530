"""Reader configuration.

Settings are read once when a reader is built: from a mapping, a JSON file, or
environment variables.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .columns import ColumnMapping
from .models import LogField

DEFAULT_CONNECTION = "default"


class LogDriver(str, Enum):
    """Supported log backends."""

    FILE = "file"
    DB = "db"


class ColumnType(str, Enum):
    """How a searchable column is matched against the backend."""

    TEXT = "text"
    JSON = "json"


class SearchableColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: LogField
    type: ColumnType = ColumnType.TEXT


class FileSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path = Path("logs/app.log")
    chunk_size: int = Field(default=512 * 1024, gt=0, description="Bytes per read window.")
    limit: int | None = Field(default=10000, ge=0, description="Max records; 0 or null = no cap.")


class DbSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    table: str = "logs"
    connection: str | None = Field(default=None, description="Named connection; default if unset.")
    chunk_size: int = Field(default=500, gt=0, description="Rows per page when chunking.")
    limit: int | None = Field(default=10000, ge=0, description="Max records; 0 or null = no cap.")
    columns: dict[str, str] = Field(default_factory=lambda: {f.value: f.value for f in LogField})
    searchable_columns: tuple[SearchableColumn, ...] = (
        SearchableColumn(name=LogField.MESSAGE, type=ColumnType.TEXT),
        SearchableColumn(name=LogField.CONTEXT, type=ColumnType.JSON),
        SearchableColumn(name=LogField.EXTRA, type=ColumnType.JSON),
    )

    @field_validator("searchable_columns", mode="before")
    @classmethod
    def _plain_names(cls, value: Any) -> Any:
        # Plain column names are accepted as text columns.
        if isinstance(value, (list, tuple)):
            return [{"name": v} if isinstance(v, str) else v for v in value]
        return value

    def column_mapping(self) -> ColumnMapping:
        return ColumnMapping.from_config(self.columns)


class LogReaderSettings(BaseModel):
    """Top-level settings for building a log reader."""

    model_config = ConfigDict(frozen=True)

    driver: LogDriver = LogDriver.FILE
    file: FileSettings = Field(default_factory=FileSettings)
    db: DbSettings = Field(default_factory=DbSettings)
    connections: dict[str, str] = Field(
        default_factory=lambda: {DEFAULT_CONNECTION: "sqlite:///logs.db"},
        description="Connection name -> SQLAlchemy URL.",
    )

    def connection_url(self, name: str | None = None) -> str:
        """Resolve a named connection (default when name is empty)."""
        key = name or self.db.connection or DEFAULT_CONNECTION
        try:
            return self.connections[key]
        except KeyError as e:
            known = ", ".join(sorted(self.connections)) or "none"
            raise ValueError(f"Unknown DB connection '{key}'. Known: {known}.") from e

    @classmethod
    def from_env(cls) -> LogReaderSettings:
        """Build settings from LOG_READER_* / LOG_* environment variables."""
        file_cfg: dict[str, Any] = {}
        db_cfg: dict[str, Any] = {}
        data: dict[str, Any] = {"file": file_cfg, "db": db_cfg}

        driver = os.getenv("LOG_READER_DRIVER")
        if driver:
            data["driver"] = driver.strip().lower()

        path = os.getenv("LOG_FILE_PATH")
        if path:
            file_cfg["path"] = path
        _set_int(file_cfg, "chunk_size", "LOG_READER_FILE_CHUNK_SIZE")
        _set_int(file_cfg, "limit", "LOG_READER_FILE_LIMIT")

        table = os.getenv("LOG_DB_TABLE_NAME")
        if table:
            db_cfg["table"] = table
        connection = os.getenv("LOG_DB_CONNECTION")
        if connection:
            db_cfg["connection"] = connection
        _set_int(db_cfg, "chunk_size", "LOG_READER_DB_CHUNK_SIZE")
        _set_int(db_cfg, "limit", "LOG_READER_DB_QUERY_LIMIT")

        url = os.getenv("LOG_READER_DATABASE_URL")
        if url:
            data["connections"] = {connection or DEFAULT_CONNECTION: url}

        return cls.model_validate(data)


def _set_int(target: dict[str, Any], key: str, env_name: str) -> None:
    raw = os.getenv(env_name)
    if raw is None or raw == "":
        return
    try:
        target[key] = int(raw)
    except ValueError as exc:
        raise ValueError(f"{env_name} must be an integer") from exc


def load_settings(path: str | Path | None = None) -> LogReaderSettings:
    """Load settings from a JSON file, or from the environment when no path is given."""
    if path is None:
        return LogReaderSettings.from_env()
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Config file not found: {p}")
    return LogReaderSettings.model_validate_json(p.read_text(encoding="utf-8"))


def effective_limit(limit: int | None) -> int | None:
    """Treat 0 and None as 'no cap'."""
    return limit if limit else None
