"""Bounded, deduplicated sample values for one column."""
from __future__ import annotations

from typing import Any, Hashable, Iterable, Mapping

DEFAULT_MAX_SAMPLES = 5


def is_blank(value: Any) -> bool:
    """Absent, ``None`` and the empty string never count as samples."""
    return value is None or (isinstance(value, str) and value == "")


def _identity(value: Any) -> Hashable:
    # bool is an int subclass: keep True and 1 distinct, 1 and 1.0 equal.
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str):
        return ("str", value)
    try:
        hash(value)
    except TypeError:
        return ("object", id(value))
    return (type(value).__name__, value)


def collect_samples(
    rows: Iterable[Mapping[str, Any]],
    column: str,
    max_samples: int = DEFAULT_MAX_SAMPLES,
) -> list[Any]:
    """First *max_samples* distinct non-blank values of *column*, in row order.

    Scanning stops as soon as the bound is reached, so the cost stays
    proportional to the bound rather than to the number of rows.
    """
    if max_samples <= 0:
        return []

    seen: set[Hashable] = set()
    samples: list[Any] = []
    for row in rows:
        if row is None or column not in row:
            continue
        value = row[column]
        if is_blank(value):
            continue
        key = _identity(value)
        if key in seen:
            continue
        seen.add(key)
        samples.append(value)
        if len(samples) >= max_samples:
            break
    return samples
