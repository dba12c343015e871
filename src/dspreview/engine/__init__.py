"""Preview and schema normalization engine. Pure computation, no I/O."""

from dspreview.engine.annotations import AnnotationKind, annotate, strip_annotation
from dspreview.engine.delimited import parse_header, parse_line, split_lines, to_delimited_text
from dspreview.engine.fallback import FallbackPolicy, fallback_table
from dspreview.engine.inference import canonical_type, infer_type
from dspreview.engine.normalizer import NormalizedPayload, PayloadShape, classify, normalize
from dspreview.engine.pagination import (
    PaginationMode,
    PreviewPaginator,
    ServerPage,
    page_window,
    total_pages_for,
    validate_server_page,
)
from dspreview.engine.sampling import collect_samples
from dspreview.engine.schema import (
    InferenceOptions,
    enrich_with_explicit_schema,
    infer_schema,
    normalize_schema_fields,
    resolve_schema,
)
from dspreview.engine.table import ColumnSchema, ColumnType, PreviewTable, TableStatus

__all__ = [
    "AnnotationKind",
    "ColumnSchema",
    "ColumnType",
    "FallbackPolicy",
    "InferenceOptions",
    "NormalizedPayload",
    "PaginationMode",
    "PayloadShape",
    "PreviewPaginator",
    "PreviewTable",
    "ServerPage",
    "TableStatus",
    "annotate",
    "canonical_type",
    "classify",
    "collect_samples",
    "enrich_with_explicit_schema",
    "fallback_table",
    "infer_schema",
    "infer_type",
    "normalize",
    "normalize_schema_fields",
    "page_window",
    "parse_header",
    "parse_line",
    "resolve_schema",
    "split_lines",
    "strip_annotation",
    "to_delimited_text",
    "total_pages_for",
    "validate_server_page",
]
