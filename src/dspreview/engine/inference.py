"""Column type inference from sample values.

Candidate types are tried in a fixed order and the first one whose
predicate holds for every sample wins::

    boolean > number > date > category > string

A column is boolean when every sample is ``true``, ``false``, ``1`` or ``0``
and at least one is a literal ``true``/``false``. Columns of only ``0``/``1``
are numbers.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Sequence

from dateutil import parser as date_parser
from dateutil.parser import ParserError

from dspreview.engine.table import ColumnType

CATEGORY_MAX_DISTINCT = 10

_BOOLEAN_TOKENS = frozenset({"true", "false"})
_BOOLEAN_DIGITS = frozenset({"1", "0"})
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_ISO_DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?)?$"
)

# Backend type names grouped by the canonical type they map to.
_TYPE_FAMILIES: dict[ColumnType, frozenset[str]] = {
    ColumnType.NUMBER: frozenset({
        "integer", "int", "number", "float", "double", "decimal", "long", "short", "byte",
    }),
    ColumnType.STRING: frozenset({
        "string", "char", "text", "varchar", "nvarchar", "character",
    }),
    ColumnType.DATE: frozenset({
        "date", "time", "datetime", "timestamp", "year", "month", "day",
    }),
    ColumnType.BOOLEAN: frozenset({"boolean", "bool", "bit"}),
    ColumnType.CATEGORY: frozenset({"category", "categorical", "enum"}),
}


def is_boolean_literal(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in _BOOLEAN_TOKENS


def is_boolean_digit(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value in (0, 1)
    return isinstance(value, str) and value.strip() in _BOOLEAN_DIGITS


def _is_boolean_column(samples: Sequence[Any]) -> bool:
    has_literal = False
    for value in samples:
        if is_boolean_literal(value):
            has_literal = True
        elif not is_boolean_digit(value):
            return False
    return has_literal


def is_number_literal(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if isinstance(value, str):
        return bool(_NUMBER_RE.match(value.strip()))
    return False


def is_iso_date(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    return isinstance(value, str) and bool(_ISO_DATE_RE.match(value.strip()))


def is_parseable_date(value: Any) -> bool:
    """Generic date parse, used only by lenient inference.

    Accepts locale formats such as ``03/04/2024`` that the ISO check
    rejects; ambiguous day/month order is not resolved.
    """
    if is_iso_date(value):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    if len(text) < 6 or not any(c.isdigit() for c in text):
        return False
    try:
        date_parser.parse(text, fuzzy=False)
    except (ParserError, ValueError, OverflowError):
        return False
    return True


def _distinct_count(samples: Sequence[Any]) -> int:
    return len({str(value) for value in samples})


def infer_type(
    samples: Sequence[Any],
    *,
    category_max_distinct: int = CATEGORY_MAX_DISTINCT,
    lenient_dates: bool = False,
) -> ColumnType:
    """Classify a column from its (already non-blank) sample values."""
    if not samples:
        return ColumnType.STRING

    if _is_boolean_column(samples):
        return ColumnType.BOOLEAN
    if all(is_number_literal(v) for v in samples):
        return ColumnType.NUMBER

    date_check = is_parseable_date if lenient_dates else is_iso_date
    if all(date_check(v) for v in samples):
        return ColumnType.DATE

    if _distinct_count(samples) <= category_max_distinct:
        return ColumnType.CATEGORY
    return ColumnType.STRING


def canonical_type(raw: Any) -> ColumnType:
    """Map a backend type name (``varchar``, ``Int``, ...) to a ColumnType."""
    if isinstance(raw, ColumnType):
        return raw
    if not isinstance(raw, str):
        return ColumnType.STRING
    name = raw.strip().lower()
    for column_type, names in _TYPE_FAMILIES.items():
        if name in names:
            return column_type
    return ColumnType.STRING
