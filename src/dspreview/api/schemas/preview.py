"""Paginated preview DTOs.

The paginated endpoint answers in PascalCase, optionally nested under
``Preview``::

    {"Headers": [...], "Data": [{"Data": {...}}, ...],
     "Pagination": {"TotalRows": 120, "CurrentPage": 2, "TotalPages": 12}}
"""
from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, model_validator


class PaginationInfo(BaseModel):
    model_config = {"populate_by_name": True}

    total_rows: int | None = Field(None, validation_alias=AliasChoices("TotalRows", "totalRows"))
    current_page: int | None = Field(None, validation_alias=AliasChoices("CurrentPage", "currentPage"))
    total_pages: int | None = Field(None, validation_alias=AliasChoices("TotalPages", "totalPages"))
    page_size: int | None = Field(None, validation_alias=AliasChoices("PageSize", "pageSize"))


class PreviewRow(BaseModel):
    model_config = {"populate_by_name": True}

    data: dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("Data", "data"))

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_row(cls, value: Any) -> Any:
        # Some rows arrive unwrapped, without the {"Data": ...} envelope.
        if isinstance(value, dict) and not isinstance(value.get("Data", value.get("data")), dict):
            return {"Data": value}
        return value


class PaginatedPreviewResponse(BaseModel):
    model_config = {"populate_by_name": True}

    headers: list[str] = Field(default_factory=list, validation_alias=AliasChoices("Headers", "headers"))
    data: list[PreviewRow] = Field(default_factory=list, validation_alias=AliasChoices("Data", "data"))
    pagination: PaginationInfo | None = Field(
        None, validation_alias=AliasChoices("Pagination", "pagination"),
    )

    @model_validator(mode="before")
    @classmethod
    def _unwrap_preview(cls, value: Any) -> Any:
        if isinstance(value, dict) and "Headers" not in value and "headers" not in value:
            inner = value.get("Preview", value.get("preview"))
            if isinstance(inner, dict):
                merged = dict(inner)
                if "Pagination" in value and "Pagination" not in merged:
                    merged["Pagination"] = value["Pagination"]
                return merged
        return value

    def rows(self) -> list[dict[str, Any]]:
        return [row.data for row in self.data]

    def to_payload(self) -> dict[str, Any]:
        """Canonical ``data`` payload understood by the normalizer."""
        payload: dict[str, Any] = {"headers": self.headers, "data": self.rows()}
        if self.pagination is not None and self.pagination.total_rows is not None:
            payload["totalRows"] = self.pagination.total_rows
        return payload
