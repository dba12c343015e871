"""PreviewTable: the canonical artifact every engine step populates.

Tables are immutable snapshots. A consumer holding a reference never sees
it change; a new load publishes a new table instead.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Sequence

ROW_NUMBER_KEY = "rowNumber"
SYNTHETIC_KEY = "syntheticKind"

# Row keys that carry metadata, never data columns.
METADATA_KEYS = frozenset({ROW_NUMBER_KEY, SYNTHETIC_KEY})

CELL_PLACEHOLDER = "—"

Row = Mapping[str, Any]


class ColumnType(str, Enum):
    BOOLEAN = "boolean"
    NUMBER = "number"
    DATE = "date"
    CATEGORY = "category"
    STRING = "string"


class TableStatus(str, Enum):
    IDLE = "idle"
    LOADED = "loaded"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class ColumnSchema:
    """One column of a table schema."""

    name: str
    type: ColumnType = ColumnType.STRING
    nullable: bool = True
    sample_values: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "nullable": self.nullable,
            "sampleValues": list(self.sample_values),
        }


@dataclass(frozen=True, slots=True)
class PreviewTable:
    """Headers, rows and schema of one preview load.

    ``total_rows`` is the logical size of the whole dataset and may exceed
    ``len(rows)`` when the payload was itself a page.
    """

    headers: tuple[str, ...] = ()
    rows: tuple[Row, ...] = ()
    total_rows: int = 0
    schema: tuple[ColumnSchema, ...] = ()
    status: TableStatus = TableStatus.IDLE
    shape: str | None = None
    error: str | None = None

    @classmethod
    def build(
        cls,
        headers: Sequence[str],
        rows: Sequence[Row],
        total_rows: int | None = None,
        schema: Sequence[ColumnSchema] = (),
        **kwargs: Any,
    ) -> "PreviewTable":
        return cls(
            headers=tuple(headers),
            rows=tuple(rows),
            total_rows=len(rows) if total_rows is None else total_rows,
            schema=tuple(schema),
            **kwargs,
        )

    @property
    def has_data(self) -> bool:
        return bool(self.rows) and bool(self.headers)

    @property
    def row_count(self) -> int:
        """Number of data rows, excluding synthetic annotation rows."""
        return sum(1 for row in self.rows if SYNTHETIC_KEY not in row)

    @property
    def is_fallback(self) -> bool:
        return self.status is TableStatus.FALLBACK

    @property
    def is_empty_result(self) -> bool:
        """True for a successful load that returned no rows."""
        return self.status is TableStatus.LOADED and not self.rows

    def with_schema(self, schema: Sequence[ColumnSchema]) -> "PreviewTable":
        return replace(self, schema=tuple(schema))

    def column(self, name: str) -> ColumnSchema | None:
        """First schema entry named *name*."""
        return next((col for col in self.schema if col.name == name), None)

    def cell(self, row: Row, header: str, placeholder: Any = CELL_PLACEHOLDER) -> Any:
        return cell_value(row, header, placeholder)

    def to_dict(self) -> dict[str, Any]:
        return {
            "headers": list(self.headers),
            "rows": [dict(row) for row in self.rows],
            "totalRows": self.total_rows,
            "schema": [col.to_dict() for col in self.schema],
            "status": self.status.value,
            "shape": self.shape,
            "error": self.error,
        }


def cell_value(row: Row, header: str, placeholder: Any = CELL_PLACEHOLDER) -> Any:
    """Value of *header* in *row*, or *placeholder* when the row lacks it."""
    if row is None or header not in row:
        return placeholder
    return row[header]


def format_cell(value: Any) -> str:
    if value is None or value == "":
        return CELL_PLACEHOLDER
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def data_keys(row: Row) -> list[str]:
    """Keys of *row* in order, metadata keys excluded."""
    return [key for key in row.keys() if key not in METADATA_KEYS]
