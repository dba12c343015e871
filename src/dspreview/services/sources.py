"""Input adapters feeding the preview engine.

Callers differ only in which source they inject; every source hands the
engine a raw payload and, for server-paged endpoints, the validated page
numbers that came with it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from dspreview.api_client import APIError, DatasetClient
from dspreview.engine.pagination import ServerPage, validate_server_page

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FetchResult:
    payload: Any
    server_page: ServerPage | None = None


@runtime_checkable
class PreviewSource(Protocol):
    """Anything that can fetch one preview payload for a dataset."""

    def fetch(
        self,
        dataset_id: str,
        *,
        page: int,
        page_size: int,
        row_hint: int | None = None,
    ) -> FetchResult:
        ...


@runtime_checkable
class SchemaSource(Protocol):
    """Anything that can fetch a backend-provided schema payload."""

    def fetch_schema(self, dataset_id: str) -> Any:
        ...


# ---------------------------------------------------------------------------
# HTTP-backed sources
# ---------------------------------------------------------------------------

class PreviewEndpointSource:
    """``/preview?rows=N``: the leading rows, paged on the client."""

    def __init__(self, client: DatasetClient) -> None:
        self._client = client

    def fetch(self, dataset_id, *, page, page_size, row_hint=None) -> FetchResult:
        return FetchResult(self._client.get_preview(dataset_id, rows=row_hint))


class ContentEndpointSource:
    """``/content``, with one attempt at the full download if it fails."""

    def __init__(self, client: DatasetClient) -> None:
        self._client = client

    def fetch(self, dataset_id, *, page, page_size, row_hint=None) -> FetchResult:
        try:
            return FetchResult(self._client.get_content(dataset_id))
        except (APIError, httpx.HTTPError) as e:
            logger.info("Content endpoint failed for dataset %s (%s); reading full dataset", dataset_id, e)
        return FetchResult(self._client.get_full_dataset(dataset_id))


class PaginatedPreviewSource:
    """``/preview/paged``: one request per page, numbers owned by the server."""

    def __init__(self, client: DatasetClient) -> None:
        self._client = client

    def fetch(self, dataset_id, *, page, page_size, row_hint=None) -> FetchResult:
        response = self._client.get_preview_page(dataset_id, page, page_size)
        pagination = response.pagination
        server_page = validate_server_page(
            total_rows=pagination.total_rows if pagination else None,
            current_page=pagination.current_page if pagination and pagination.current_page else page,
            total_pages=pagination.total_pages if pagination else None,
            page_size=page_size,
            rows_on_page=len(response.data),
        )
        return FetchResult(response.to_payload(), server_page)


class ClientSchemaSource:
    def __init__(self, client: DatasetClient) -> None:
        self._client = client

    def fetch_schema(self, dataset_id: str) -> Any:
        return self._client.get_schema(dataset_id)


# ---------------------------------------------------------------------------
# Offline sources
# ---------------------------------------------------------------------------

class StaticPayloadSource:
    """A payload already in hand, e.g. read from a local file."""

    def __init__(self, payload: Any) -> None:
        self._payload = payload

    def fetch(self, dataset_id, *, page, page_size, row_hint=None) -> FetchResult:
        return FetchResult(self._payload)


SOURCE_KINDS = {
    "preview": PreviewEndpointSource,
    "content": ContentEndpointSource,
    "paged": PaginatedPreviewSource,
}


def build_source(kind: str, client: DatasetClient) -> PreviewSource:
    try:
        return SOURCE_KINDS[kind](client)
    except KeyError:
        raise ValueError(f"Unknown preview source {kind!r}; expected one of {sorted(SOURCE_KINDS)}") from None
