"""Logical field to physical column mapping."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .models import LogField

LEVEL_NAME_KEY = "level_name"


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Translate logical field names into storage column names.

    Unmapped names resolve to themselves. The optional ``level_name`` entry marks
    schemas that keep a readable level name next to a numeric severity column.
    """

    columns: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    @classmethod
    def from_config(cls, columns: Mapping[str, str] | None) -> ColumnMapping:
        out: dict[str, str] = {}
        for key, col in (columns or {}).items():
            name = key.value if isinstance(key, LogField) else str(key)
            if col:
                out[name] = str(col)
        return cls(columns=out)

    def column(self, name: LogField | str) -> str:
        """Return the physical column for a logical name."""
        key = name.value if isinstance(name, LogField) else name
        return self.columns.get(key, key)

    @property
    def level_name_column(self) -> str | None:
        return self.columns.get(LEVEL_NAME_KEY)
