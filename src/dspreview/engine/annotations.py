"""Synthetic rows carrying the result of a dataset operation.

A validation or split result is shown inside the preview as one extra row:
blank for every real column, with the human-readable summary in a column of
its own. Each kind has at most one live row; annotating again replaces it.
"""
from __future__ import annotations

from dataclasses import replace
from enum import Enum

from dspreview.engine.table import SYNTHETIC_KEY, ColumnSchema, ColumnType, PreviewTable


class AnnotationKind(str, Enum):
    VALIDATION = "ValidationSummary"
    SPLIT = "SplitSummary"


def strip_annotation(table: PreviewTable, kind: AnnotationKind) -> PreviewTable:
    rows = tuple(row for row in table.rows if row.get(SYNTHETIC_KEY) != kind.value)
    if len(rows) == len(table.rows):
        return table
    return replace(table, rows=rows)


def annotate(table: PreviewTable, kind: AnnotationKind, message: str) -> PreviewTable:
    """Return a new table with *message* as the single synthetic row of *kind*.

    Synthetic rows are not data: ``total_rows`` is unchanged, so the bound
    ``row_count <= total_rows`` holds while ``len(rows)`` may exceed it.
    """
    column = kind.value
    headers = list(table.headers)
    schema_aligned = len(table.schema) == len(headers)
    if column not in headers:
        headers.append(column)

    rows = [row for row in table.rows if row.get(SYNTHETIC_KEY) != column]
    synthetic = {header: "" for header in headers}
    synthetic[column] = message
    synthetic[SYNTHETIC_KEY] = column
    rows.append(synthetic)

    schema = list(table.schema)
    if schema_aligned:
        entry = ColumnSchema(name=column, type=ColumnType.STRING, nullable=True, sample_values=(message,))
        index = next((i for i, col in enumerate(schema) if col.name == column), None)
        if index is None:
            schema.append(entry)
        else:
            schema[index] = entry

    return replace(table, headers=tuple(headers), rows=tuple(rows), schema=tuple(schema))
