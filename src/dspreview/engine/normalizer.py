"""Turn a payload of unknown shape into canonical headers, rows and total.

Backends answer preview requests in several wire shapes. :func:`classify`
names the shape by structural inspection, in a fixed precedence order
because one payload can satisfy several shapes; :func:`normalize` then
handles exactly that shape. The order is:

1. ``ROW_ARRAY``         a list of row objects
2. ``PREVIEW_WRAPPER``   ``{"preview": {"data": [...], "headers", "totalRows"}}``
3. ``DATA_OBJECT``       ``{"data": [...], "headers", "totalRows"}``
4. ``VALUE_MATRIX``      ``{"values": [[header...], [value...], ...]}``
5. ``CONTENT_TEXT``      ``{"content": "<delimited text>"}``
6. ``RAW_TEXT``          a string: JSON if it looks like JSON, else delimited text
7. ``UNRECOGNIZED``      anything else

Normalization never raises. An unrecognized payload yields an empty result
with ``recognized == False`` so the caller can pick its fallback.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from dspreview.engine.delimited import parse_header, parse_line, split_lines
from dspreview.engine.table import ROW_NUMBER_KEY, Row, data_keys

logger = logging.getLogger(__name__)


class PayloadShape(str, Enum):
    ROW_ARRAY = "row_array"
    PREVIEW_WRAPPER = "preview_wrapper"
    DATA_OBJECT = "data_object"
    VALUE_MATRIX = "value_matrix"
    CONTENT_TEXT = "content_text"
    RAW_TEXT = "raw_text"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True, slots=True)
class NormalizedPayload:
    headers: tuple[str, ...]
    rows: tuple[Row, ...]
    total_rows: int
    shape: PayloadShape

    @property
    def recognized(self) -> bool:
        return self.shape is not PayloadShape.UNRECOGNIZED

    @property
    def is_empty(self) -> bool:
        return not self.rows


_UNRECOGNIZED = NormalizedPayload((), (), 0, PayloadShape.UNRECOGNIZED)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def classify(payload: Any) -> PayloadShape:
    """Name the shape of *payload*; first match in precedence order wins."""
    if _is_list(payload):
        return PayloadShape.ROW_ARRAY
    if isinstance(payload, Mapping):
        preview = payload.get("preview")
        if isinstance(preview, Mapping) and _is_list(preview.get("data")):
            return PayloadShape.PREVIEW_WRAPPER
        if _is_list(payload.get("data")):
            return PayloadShape.DATA_OBJECT
        if _is_list(payload.get("values")):
            return PayloadShape.VALUE_MATRIX
        if isinstance(payload.get("content"), str):
            return PayloadShape.CONTENT_TEXT
        return PayloadShape.UNRECOGNIZED
    if isinstance(payload, (str, bytes, bytearray)):
        return PayloadShape.RAW_TEXT
    return PayloadShape.UNRECOGNIZED


def normalize(payload: Any) -> NormalizedPayload:
    """Canonical ``(headers, rows, total_rows)`` for any supported payload."""
    shape = classify(payload)
    logger.debug("Normalizing payload as %s", shape.value)

    if shape is PayloadShape.ROW_ARRAY:
        return _from_rows(payload, None, None, shape)
    if shape is PayloadShape.PREVIEW_WRAPPER:
        preview = payload["preview"]
        total = preview.get("totalRows", preview.get("totalPreviewRows"))
        return _from_rows(preview["data"], preview.get("headers"), total, shape)
    if shape is PayloadShape.DATA_OBJECT:
        return _from_rows(payload["data"], payload.get("headers"), payload.get("totalRows"), shape)
    if shape is PayloadShape.VALUE_MATRIX:
        return _from_value_matrix(payload["values"], payload.get("rowCount"))
    if shape is PayloadShape.CONTENT_TEXT:
        return _from_delimited(payload["content"], shape)
    if shape is PayloadShape.RAW_TEXT:
        return _from_text(payload)

    logger.warning("Unrecognized preview payload of type %s", type(payload).__name__)
    return _UNRECOGNIZED


# ---------------------------------------------------------------------------
# Per-shape handlers
# ---------------------------------------------------------------------------

def _total(declared: Any, row_count: int) -> int:
    """Declared total when usable, never below the rows actually present."""
    if isinstance(declared, bool):
        return row_count
    try:
        total = int(declared)
    except (TypeError, ValueError, OverflowError):
        return row_count
    return max(total, row_count)


def _clean_headers(headers: Any) -> list[str] | None:
    if not _is_list(headers):
        return None
    names = [str(h) for h in headers if h is not None and str(h) != ""]
    return names or None


def _from_rows(
    items: Sequence[Any],
    headers: Any,
    declared_total: Any,
    shape: PayloadShape,
) -> NormalizedPayload:
    # Every element is a row; non-objects are kept as blank rows.
    rows = [item if isinstance(item, Mapping) else {} for item in items]

    names = _clean_headers(headers)
    if names is None:
        names = next((data_keys(row) for row in rows if data_keys(row)), [])
    if not names:
        logger.debug("No column names in %d rows; treating payload as empty", len(rows))
        return NormalizedPayload((), (), _total(declared_total, 0), shape)

    return NormalizedPayload(
        headers=tuple(names),
        rows=tuple(rows),
        total_rows=_total(declared_total, len(rows)),
        shape=shape,
    )


def _zip_row(headers: Sequence[str], values: Sequence[Any], missing: Any) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for idx, header in enumerate(headers):
        if header in row:
            # duplicate header: the first occurrence owns the name
            continue
        row[header] = values[idx] if idx < len(values) else missing
    return row


def _from_value_matrix(values: Sequence[Any], declared_total: Any) -> NormalizedPayload:
    if not values or not _is_list(values[0]):
        return NormalizedPayload((), (), 0, PayloadShape.VALUE_MATRIX)

    headers = [str(h) for h in values[0]]
    if not headers:
        return NormalizedPayload((), (), 0, PayloadShape.VALUE_MATRIX)
    rows = [
        _zip_row(headers, line if _is_list(line) else [], None)
        for line in values[1:]
    ]
    return NormalizedPayload(
        headers=tuple(headers),
        rows=tuple(rows),
        total_rows=_total(declared_total, len(rows)),
        shape=PayloadShape.VALUE_MATRIX,
    )


def _from_delimited(text: str, shape: PayloadShape, delimiter: str = ",") -> NormalizedPayload:
    lines = split_lines(text)
    if not lines:
        return NormalizedPayload((), (), 0, shape)

    headers = parse_header(lines[0], delimiter)
    if not headers:
        logger.debug("Delimited header line has no column names; treating payload as empty")
        return NormalizedPayload((), (), 0, shape)
    rows = []
    for number, line in enumerate(lines[1:], start=1):
        row: dict[str, Any] = {ROW_NUMBER_KEY: number}
        row.update(_zip_row(headers, parse_line(line, delimiter), ""))
        rows.append(row)

    return NormalizedPayload(tuple(headers), tuple(rows), len(rows), shape)


def _from_text(payload: str | bytes | bytearray) -> NormalizedPayload:
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8-sig", errors="replace")
    text = payload.strip()

    if text.startswith(("{", "[")):
        try:
            decoded = json.loads(text)
        except ValueError as e:
            logger.debug("Text payload is not valid JSON (%s); reading as delimited text", e)
        else:
            return normalize(decoded)

    return _from_delimited(text, PayloadShape.RAW_TEXT)
