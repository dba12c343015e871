"""Typed HTTP client for the dataset backend.

Only imports from ``dspreview.api.schemas``. Preview, content and schema
endpoints return raw payloads: their shape is not known until the engine
classifies it. Operation endpoints return pure Pydantic DTOs.
"""
from __future__ import annotations

from typing import Any

import httpx

from dspreview.api.schemas.datasets import Dataset
from dspreview.api.schemas.operations import SplitRequest, SplitResult, ValidationResult
from dspreview.api.schemas.preview import PaginatedPreviewResponse
from dspreview.config import settings


class APIError(Exception):
    """Raised when the backend returns a 4xx/5xx response."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"[{status_code}] {detail}")


class DatasetClient:
    """One method per backend endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if token is None and settings.DATASET_API_TOKEN is not None:
            token = settings.DATASET_API_TOKEN.get_secret_value()
        headers = {"Authorization": f"Bearer {token}"} if token else None
        self._client = httpx.Client(
            base_url=base_url or settings.DATASET_API_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS if timeout is None else timeout,
            headers=headers,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DatasetClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return
        try:
            body = resp.json()
            detail = body.get("detail") or body.get("title") or body.get("message") or resp.text
        except Exception:
            detail = resp.text
        raise APIError(resp.status_code, str(detail))

    @staticmethod
    def _body(resp: httpx.Response) -> Any:
        """Decoded JSON for JSON responses, text otherwise."""
        content_type = resp.headers.get("content-type", "")
        if "json" in content_type:
            return resp.json()
        return resp.text

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    def get_dataset(self, dataset_id: str) -> Dataset:
        resp = self._client.get(f"/api/Dataset/{dataset_id}")
        self._raise_for_status(resp)
        return Dataset.model_validate(resp.json())

    # ------------------------------------------------------------------
    # Preview payloads
    # ------------------------------------------------------------------

    def get_preview(self, dataset_id: str, rows: int | None = None) -> Any:
        params = {"rows": rows} if rows is not None else None
        resp = self._client.get(f"/api/Dataset/{dataset_id}/preview", params=params)
        self._raise_for_status(resp)
        return self._body(resp)

    def get_content(self, dataset_id: str) -> Any:
        resp = self._client.get(f"/api/Dataset/{dataset_id}/content")
        self._raise_for_status(resp)
        return self._body(resp)

    def get_full_dataset(self, dataset_id: str) -> Any:
        resp = self._client.get(f"/api/Dataset/{dataset_id}/download", params={"format": "csv"})
        self._raise_for_status(resp)
        return self._body(resp)

    def get_preview_page(self, dataset_id: str, page: int, page_size: int) -> PaginatedPreviewResponse:
        resp = self._client.get(
            f"/api/Dataset/{dataset_id}/preview/paged",
            params={"page": page, "pageSize": page_size},
        )
        self._raise_for_status(resp)
        return PaginatedPreviewResponse.model_validate(resp.json())

    def get_schema(self, dataset_id: str) -> Any:
        resp = self._client.get(f"/api/Dataset/{dataset_id}/schema")
        self._raise_for_status(resp)
        return resp.json()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def validate_dataset(self, dataset_id: str) -> ValidationResult:
        resp = self._client.post(f"/api/Dataset/validate/{dataset_id}")
        self._raise_for_status(resp)
        return ValidationResult.model_validate(resp.json())

    def split_dataset(self, dataset_id: str, request: SplitRequest) -> SplitResult:
        resp = self._client.post(
            f"/api/Dataset/train-split/{dataset_id}",
            json=request.model_dump(by_alias=True, exclude_none=True),
        )
        self._raise_for_status(resp)
        return SplitResult.model_validate(resp.json())

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def health(self) -> dict:
        resp = self._client.get("/health")
        self._raise_for_status(resp)
        body = self._body(resp)
        return body if isinstance(body, dict) else {"status": str(body).strip() or "ok"}
