"""Tables substituted when a preview cannot be loaded.

The mock table is a deliberate product behaviour: the view stays populated
with illustrative data. Every fallback table has ``status == FALLBACK`` so
callers and tests can tell it apart from real data.
"""
from __future__ import annotations

from enum import Enum

from dspreview.engine.table import ROW_NUMBER_KEY, ColumnSchema, ColumnType, PreviewTable, TableStatus


class FallbackPolicy(str, Enum):
    MOCK = "mock"
    EMPTY = "empty"
    ERROR = "error"


MOCK_HEADERS = ("id", "name", "age", "email", "isActive")

MOCK_ROWS = (
    {"id": 1, "name": "John Doe", "age": 30, "email": "john@example.com", "isActive": True},
    {"id": 2, "name": "Jane Smith", "age": 25, "email": "jane@example.com", "isActive": True},
    {"id": 3, "name": "Bob Johnson", "age": 35, "email": "bob@example.com", "isActive": False},
    {"id": 4, "name": "Alice Brown", "age": 28, "email": "alice@example.com", "isActive": True},
    {"id": 5, "name": "Charlie Wilson", "age": 40, "email": "charlie@example.com", "isActive": False},
)

MOCK_TOTAL_ROWS = 100

MOCK_SCHEMA = (
    ColumnSchema("id", ColumnType.NUMBER, False, (1, 2, 3, 4, 5)),
    ColumnSchema("name", ColumnType.STRING, False, ("John Doe", "Jane Smith", "Bob Johnson")),
    ColumnSchema("age", ColumnType.NUMBER, False, (30, 25, 35, 28, 40)),
    ColumnSchema("email", ColumnType.STRING, False, ("john@example.com", "jane@example.com")),
    ColumnSchema("isActive", ColumnType.BOOLEAN, False, (True, False)),
)


def mock_table(reason: str | None = None) -> PreviewTable:
    return PreviewTable.build(
        MOCK_HEADERS,
        [dict(row) for row in MOCK_ROWS],
        MOCK_TOTAL_ROWS,
        MOCK_SCHEMA,
        status=TableStatus.FALLBACK,
        error=reason,
    )


def empty_table(reason: str | None = None) -> PreviewTable:
    return PreviewTable(status=TableStatus.FALLBACK, error=reason)


def error_table(reason: str | None = None) -> PreviewTable:
    message = reason or "Failed to process dataset preview"
    return PreviewTable.build(
        ("Error",),
        [{ROW_NUMBER_KEY: 1, "Error": message}],
        1,
        (ColumnSchema("Error", ColumnType.STRING, False, (message,)),),
        status=TableStatus.FALLBACK,
        error=message,
    )


_BUILDERS = {
    FallbackPolicy.MOCK: mock_table,
    FallbackPolicy.EMPTY: empty_table,
    FallbackPolicy.ERROR: error_table,
}


def fallback_table(policy: FallbackPolicy, reason: str | None = None) -> PreviewTable:
    """The table *policy* substitutes for a failed load."""
    return _BUILDERS[FallbackPolicy(policy)](reason)
