"""Preview use-case service: the one façade UI consumers talk to.

Each load builds a complete PreviewTable off to the side and publishes it
with a single assignment. Fetches for the same slot (preview, schema) are
numbered; a result is applied only if no newer fetch of its slot started
meanwhile, so the last request wins.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Sequence

from dspreview.api.schemas.operations import SplitResult, ValidationResult
from dspreview.config import settings
from dspreview.domain.exceptions import DatasetPreviewError
from dspreview.engine.annotations import AnnotationKind, annotate
from dspreview.engine.fallback import FallbackPolicy, fallback_table
from dspreview.engine.normalizer import normalize
from dspreview.engine.pagination import DEFAULT_PAGE_SIZE, PaginationMode, PreviewPaginator, ServerPage
from dspreview.engine.schema import DEFAULT_OPTIONS, InferenceOptions, resolve_schema
from dspreview.engine.table import ColumnSchema, PreviewTable, Row, TableStatus
from dspreview.services.sources import PreviewSource, SchemaSource

logger = logging.getLogger(__name__)

PREVIEW_SLOT = "preview"
SCHEMA_SLOT = "schema"


class PreviewService:
    def __init__(
        self,
        source: PreviewSource,
        schema_source: SchemaSource | None = None,
        *,
        fallback_policy: FallbackPolicy = FallbackPolicy.MOCK,
        page_size: int = DEFAULT_PAGE_SIZE,
        row_hint: int | None = None,
        options: InferenceOptions = DEFAULT_OPTIONS,
    ) -> None:
        self._source = source
        self._schema_source = schema_source
        self._fallback_policy = FallbackPolicy(fallback_policy)
        self._row_hint = row_hint
        self._options = options
        self._paginator = PreviewPaginator(page_size)
        self._table = PreviewTable()
        self._dataset_id: str | None = None
        self._tokens = {PREVIEW_SLOT: 0, SCHEMA_SLOT: 0}

    @classmethod
    def from_settings(
        cls,
        source: PreviewSource,
        schema_source: SchemaSource | None = None,
    ) -> "PreviewService":
        return cls(
            source,
            schema_source,
            fallback_policy=settings.PREVIEW_FALLBACK,
            page_size=settings.PREVIEW_PAGE_SIZE,
            row_hint=settings.PREVIEW_ROW_HINT,
            options=InferenceOptions(
                max_samples=settings.SAMPLE_VALUE_LIMIT,
                scan_rows=settings.SCHEMA_SCAN_ROWS,
                category_max_distinct=settings.CATEGORY_MAX_DISTINCT,
                lenient_dates=settings.LENIENT_DATES,
            ),
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def table(self) -> PreviewTable:
        return self._table

    @property
    def dataset_id(self) -> str | None:
        return self._dataset_id

    @property
    def paginator(self) -> PreviewPaginator:
        return self._paginator

    @property
    def headers(self) -> tuple[str, ...]:
        return self._table.headers

    @property
    def schema(self) -> tuple[ColumnSchema, ...]:
        return self._table.schema

    @property
    def total_rows(self) -> int:
        return self._table.total_rows

    @property
    def has_data(self) -> bool:
        return self._table.has_data

    @property
    def row_count(self) -> int:
        return self._table.row_count

    @property
    def paged_rows(self) -> list[Row]:
        return self._paginator.window(self._table.rows)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def load(self, dataset_id: str) -> PreviewTable:
        """Load *dataset_id* from page 1."""
        self._dataset_id = dataset_id
        self._table = PreviewTable()
        return self._fetch(dataset_id, page=1, keep_page=False)

    def refresh(self, dataset_id: str | None = None) -> PreviewTable:
        """Reload, staying on the current page when it still exists."""
        dataset_id = dataset_id or self._dataset_id
        if dataset_id is None:
            raise DatasetPreviewError("No dataset loaded to refresh")
        self._dataset_id = dataset_id
        return self._fetch(dataset_id, page=self._paginator.current_page, keep_page=True)

    def change_page(self, page: int) -> bool:
        """Go to *page*. Pages outside ``[1, total_pages]`` are ignored."""
        if not self._paginator.can_go_to(page):
            return False
        if self._paginator.mode is PaginationMode.SERVER and self._dataset_id is not None:
            self._fetch(self._dataset_id, page=page, keep_page=True)
            return True
        return self._paginator.change_page(page)

    def set_page_size(self, page_size: int) -> None:
        """Change the page size; server-paged previews refetch from page 1."""
        self._paginator.set_page_size(page_size)
        if self._paginator.mode is PaginationMode.SERVER and self._dataset_id is not None:
            self._fetch(self._dataset_id, page=1, keep_page=False)

    def reload_schema(self) -> tuple[ColumnSchema, ...]:
        """Resolve the schema again for the rows currently shown."""
        table = self._table
        if table.status is not TableStatus.LOADED:
            return table.schema
        token = self._begin(SCHEMA_SLOT)
        schema = self._resolve_schema(self._dataset_id, table.headers, table.rows)
        if not self._is_current(SCHEMA_SLOT, token) or self._table is not table:
            logger.debug("Discarding stale schema for dataset %s", self._dataset_id)
            return self._table.schema
        self._table = table.with_schema(schema)
        return self._table.schema

    # ------------------------------------------------------------------
    # Operation results
    # ------------------------------------------------------------------

    def apply_validation_result(self, result: ValidationResult | str) -> PreviewTable:
        message = result if isinstance(result, str) else result.summary()
        return self._annotate(AnnotationKind.VALIDATION, message)

    def apply_split_result(self, result: SplitResult | str) -> PreviewTable:
        message = result if isinstance(result, str) else result.summary()
        return self._annotate(AnnotationKind.SPLIT, message)

    def _annotate(self, kind: AnnotationKind, message: str) -> PreviewTable:
        table = annotate(self._table, kind, message)
        self._table = table
        if self._paginator.mode is PaginationMode.CLIENT:
            self._paginator.set_total_rows(len(table.rows))
        return table

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin(self, slot: str) -> int:
        self._tokens[slot] += 1
        return self._tokens[slot]

    def _is_current(self, slot: str, token: int) -> bool:
        return self._tokens[slot] == token

    def _resolve_schema(
        self,
        dataset_id: str | None,
        headers: Sequence[str],
        rows: Sequence[Row],
    ) -> list[ColumnSchema]:
        fetch_explicit = None
        if self._schema_source is not None and dataset_id is not None:
            fetch_explicit = partial(self._schema_source.fetch_schema, dataset_id)

        logger.debug(
            "Resolving schema for dataset %s from %s",
            dataset_id, "backend schema" if fetch_explicit else "rows",
        )
        return resolve_schema(fetch_explicit, rows, headers, self._options)

    def _fetch(self, dataset_id: str, *, page: int, keep_page: bool) -> PreviewTable:
        token = self._begin(PREVIEW_SLOT)
        try:
            result = self._source.fetch(
                dataset_id,
                page=page,
                page_size=self._paginator.page_size,
                row_hint=self._row_hint,
            )
        except Exception as e:
            logger.warning("Preview fetch failed for dataset %s: %s", dataset_id, e)
            return self._apply_fallback(token, dataset_id, f"Failed to load preview: {e}")

        normalized = normalize(result.payload)
        if not normalized.recognized:
            return self._apply_fallback(token, dataset_id, "Unrecognized preview payload")

        # A schema reload still in flight was resolved for the table being replaced.
        self._begin(SCHEMA_SLOT)
        schema = self._resolve_schema(dataset_id, normalized.headers, normalized.rows)
        table = PreviewTable.build(
            normalized.headers,
            normalized.rows,
            normalized.total_rows,
            schema,
            status=TableStatus.LOADED,
            shape=normalized.shape.value,
        )

        if not self._is_current(PREVIEW_SLOT, token):
            logger.debug("Discarding stale preview result for dataset %s", dataset_id)
            return self._table
        self._publish(table, result.server_page, page if keep_page else 1)
        return table

    def _apply_fallback(self, token: int, dataset_id: str, reason: str) -> PreviewTable:
        if not self._is_current(PREVIEW_SLOT, token):
            logger.debug("Discarding stale failure for dataset %s", dataset_id)
            return self._table
        table = fallback_table(self._fallback_policy, reason)
        logger.info("Applying %s fallback table for dataset %s", self._fallback_policy.value, dataset_id)
        self._publish(table, None, 1)
        return table

    def _publish(self, table: PreviewTable, server_page: ServerPage | None, page: int) -> None:
        if server_page is not None:
            self._paginator.apply_server_page(server_page)
        else:
            self._paginator.reset(len(table.rows))
            if page > 1:
                self._paginator.change_page(min(page, self._paginator.total_pages))
        self._table = table
