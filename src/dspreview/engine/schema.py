"""Column schema inference and explicit-schema enrichment.

Self-inference looks at a bounded window of leading rows (``scan_rows``):
type and nullability are therefore estimates for the window, not proofs
about the whole dataset. Widening the window trades speed for precision.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from dspreview.domain.exceptions import InvalidSchemaPayloadError
from dspreview.engine.inference import CATEGORY_MAX_DISTINCT, canonical_type, infer_type
from dspreview.engine.sampling import DEFAULT_MAX_SAMPLES, collect_samples, is_blank
from dspreview.engine.table import SYNTHETIC_KEY, ColumnSchema, Row, data_keys

logger = logging.getLogger(__name__)

DEFAULT_SCAN_ROWS = 100

_CONTAINER_KEYS = ("fields", "schema", "columns", "Fields", "Schema", "Columns")
_NAME_KEYS = ("name", "column_name", "Name")
_TYPE_KEYS = ("type", "data_type", "DataType", "Type")
_NULLABLE_KEYS = ("nullable", "Nullable")
_REQUIRED_KEYS = ("IsRequired", "isRequired")
_SAMPLE_KEYS = ("sampleValues", "samples", "SampleValues", "Sample")


@dataclass(frozen=True, slots=True)
class InferenceOptions:
    max_samples: int = DEFAULT_MAX_SAMPLES
    scan_rows: int = DEFAULT_SCAN_ROWS
    category_max_distinct: int = CATEGORY_MAX_DISTINCT
    lenient_dates: bool = False


DEFAULT_OPTIONS = InferenceOptions()


def data_rows(rows: Sequence[Row]) -> list[Row]:
    """Rows that carry dataset content (synthetic annotation rows dropped)."""
    return [row for row in rows if row is not None and SYNTHETIC_KEY not in row]


def _headers_or_derived(rows: Sequence[Row], headers: Sequence[str] | None) -> list[str]:
    if headers:
        return list(headers)
    first = next((row for row in rows if row), None)
    return data_keys(first) if first else []


def _window_has_blank(window: Sequence[Row], name: str) -> bool:
    usable = sum(1 for row in window if name in row and not is_blank(row[name]))
    return usable < len(window)


def infer_column(
    rows: Sequence[Row],
    name: str,
    options: InferenceOptions = DEFAULT_OPTIONS,
) -> ColumnSchema:
    window = rows[: options.scan_rows]
    type_samples = collect_samples(window, name, max_samples=max(len(window), 1))
    return ColumnSchema(
        name=name,
        type=infer_type(
            type_samples,
            category_max_distinct=options.category_max_distinct,
            lenient_dates=options.lenient_dates,
        ),
        nullable=_window_has_blank(window, name),
        sample_values=tuple(collect_samples(rows, name, options.max_samples)),
    )


def infer_schema(
    rows: Sequence[Row],
    headers: Sequence[str] | None = None,
    options: InferenceOptions = DEFAULT_OPTIONS,
) -> list[ColumnSchema]:
    """Build one ColumnSchema per header from the rows alone.

    Deterministic: the same rows and headers always give the same schema.
    """
    content = data_rows(rows)
    return [infer_column(content, name, options) for name in _headers_or_derived(content, headers)]


# ---------------------------------------------------------------------------
# Explicit (backend-provided) schemas
# ---------------------------------------------------------------------------

def _first(field: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if field.get(key) is not None:
            return field[key]
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in {"false", "0", "no", ""}
    return bool(value)


def _field_nullable(field: Mapping[str, Any]) -> bool:
    nullable = _first(field, _NULLABLE_KEYS)
    if nullable is not None:
        return _as_bool(nullable)
    required = _first(field, _REQUIRED_KEYS)
    if required is not None:
        return not _as_bool(required)
    return True


def _field_samples(field: Mapping[str, Any], limit: int) -> tuple[Any, ...]:
    raw = _first(field, _SAMPLE_KEYS)
    if raw is None:
        return ()
    values = raw if isinstance(raw, (list, tuple)) else [raw]
    return tuple(collect_samples(({"v": v} for v in values), "v", limit))


def _field_list(payload: Any) -> list[Any]:
    if isinstance(payload, (list, tuple)):
        return list(payload)
    if isinstance(payload, Mapping):
        for key in _CONTAINER_KEYS:
            if isinstance(payload.get(key), (list, tuple)):
                return list(payload[key])
    raise InvalidSchemaPayloadError(
        f"Schema payload of type {type(payload).__name__} has no field list"
    )


def normalize_schema_fields(
    payload: Any,
    max_samples: int = DEFAULT_MAX_SAMPLES,
) -> list[ColumnSchema]:
    """Read a backend schema in any of its naming conventions.

    Accepts a bare field list or an object wrapping one under
    ``fields``/``schema``/``columns``. ``IsRequired`` has inverted polarity
    relative to ``nullable``.
    """
    fields: list[ColumnSchema] = []
    for raw in _field_list(payload):
        if not isinstance(raw, Mapping):
            raise InvalidSchemaPayloadError(
                f"Schema field must be an object, got {type(raw).__name__}"
            )
        name = _first(raw, _NAME_KEYS)
        if name is None or str(name) == "":
            logger.warning("Skipping schema field without a name: %r", raw)
            continue
        fields.append(ColumnSchema(
            name=str(name),
            type=canonical_type(_first(raw, _TYPE_KEYS) or "string"),
            nullable=_field_nullable(raw),
            sample_values=_field_samples(raw, max_samples),
        ))
    return fields


def enrich_with_explicit_schema(
    explicit: Any,
    rows: Sequence[Row],
    headers: Sequence[str] | None = None,
    options: InferenceOptions = DEFAULT_OPTIONS,
) -> list[ColumnSchema]:
    """Align a backend schema with the table and refresh its samples.

    Sample values come from the loaded rows when there are any; the
    backend's own samples are kept only when the rows yield none. A column
    the backend omits is inferred locally. Nullability only ever widens.
    """
    if isinstance(explicit, (list, tuple)) and all(isinstance(f, ColumnSchema) for f in explicit):
        fields = list(explicit)
    else:
        fields = normalize_schema_fields(explicit, options.max_samples)

    by_name: dict[str, ColumnSchema] = {}
    for field in fields:
        by_name.setdefault(field.name, field)

    content = data_rows(rows)
    window = content[: options.scan_rows]
    schema: list[ColumnSchema] = []
    for name in _headers_or_derived(content, headers):
        field = by_name.get(name)
        if field is None:
            logger.debug("Column %r missing from explicit schema; inferring", name)
            schema.append(infer_column(content, name, options))
            continue
        samples = tuple(collect_samples(content, name, options.max_samples)) if content else ()
        schema.append(ColumnSchema(
            name=name,
            type=field.type,
            nullable=field.nullable or (bool(window) and _window_has_blank(window, name)),
            sample_values=samples or field.sample_values,
        ))
    return schema


def resolve_schema(
    fetch_explicit: Callable[[], Any] | None,
    rows: Sequence[Row],
    headers: Sequence[str] | None = None,
    options: InferenceOptions = DEFAULT_OPTIONS,
) -> list[ColumnSchema]:
    """Explicit schema when the source delivers one, self-inference otherwise.

    Never raises: any failure of *fetch_explicit* or of its payload falls
    back to :func:`infer_schema`.
    """
    if fetch_explicit is None:
        return infer_schema(rows, headers, options)
    try:
        payload = fetch_explicit()
        return enrich_with_explicit_schema(payload, rows, headers, options)
    except Exception as e:
        logger.warning("Explicit schema unavailable (%s); inferring from rows", e)
        return infer_schema(rows, headers, options)
