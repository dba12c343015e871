"""Validation and split result DTOs.

Two backends report these results, one in camelCase and one in PascalCase;
both are accepted. ``summary()`` renders the line shown in the preview.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class ValidationStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    FAILED = "failed"


def normalize_validation_status(raw: Any) -> ValidationStatus:
    """``passed`` means success; unknown statuses count as errors."""
    if isinstance(raw, ValidationStatus):
        return raw
    value = str(raw or "").strip().lower()
    if value in {"passed", "success"}:
        return ValidationStatus.SUCCESS
    if value in {"error", "warning", "failed"}:
        return ValidationStatus(value)
    logger.warning("Unexpected validation status %r, treating as error", raw)
    return ValidationStatus.ERROR


class ValidationResult(BaseModel):
    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}

    status: ValidationStatus = Field(
        ValidationStatus.ERROR, validation_alias=AliasChoices("status", "Status"),
    )
    error_count: int = Field(0, validation_alias=AliasChoices("errorCount", "ErrorCount"))
    error_lines: list[int] = Field(default_factory=list, validation_alias=AliasChoices("errorLines", "ErrorLines"))
    total_rows: int = Field(0, validation_alias=AliasChoices("totalRows", "TotalRows"))
    validation_id: str | None = Field(None, validation_alias=AliasChoices("validationId", "Id"))
    message: str | None = Field(None, validation_alias=AliasChoices("message", "ErrorMessage"))
    quality_score: float | None = Field(None, validation_alias=AliasChoices("qualityScore", "QualityScore"))

    @model_validator(mode="before")
    @classmethod
    def _status_from_is_valid(cls, value: Any) -> Any:
        if isinstance(value, dict) and "status" not in value and "Status" not in value:
            is_valid = value.get("IsValid", value.get("isValid"))
            if is_valid is not None:
                return {**value, "status": "passed" if is_valid else "failed"}
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> ValidationStatus:
        return normalize_validation_status(value)

    @field_validator("error_count", "total_rows", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    def summary(self) -> str:
        text = f"Validation {self.status.value}: {self.error_count} errors in {self.total_rows} rows"
        if self.error_lines:
            shown = ", ".join(str(line) for line in self.error_lines[:10])
            more = "" if len(self.error_lines) <= 10 else f" (+{len(self.error_lines) - 10} more)"
            text += f"; lines {shown}{more}"
        if self.message:
            text += f". {self.message}"
        return text


class SplitRequest(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    train_ratio: float
    test_ratio: float
    shuffle: bool | None = None
    stratify_by: str | None = None


class SplitResult(BaseModel):
    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}

    message: str | None = Field(None, validation_alias=AliasChoices("message", "Message"))
    success: bool = Field(True, validation_alias=AliasChoices("success", "Success"))
    error_message: str | None = Field(None, validation_alias=AliasChoices("errorMessage", "ErrorMessage"))
    train_count: int | None = Field(
        None, validation_alias=AliasChoices("trainCount", "TrainingRowCount", "TrainCount"),
    )
    test_count: int | None = Field(
        None, validation_alias=AliasChoices("testCount", "TestRowCount", "TestCount"),
    )
    train_percentage: float | None = Field(
        None, validation_alias=AliasChoices("trainPercentage", "TrainPercentage"),
    )
    test_percentage: float | None = Field(
        None, validation_alias=AliasChoices("testPercentage", "TestPercentage"),
    )
    version_id: str | None = Field(None, validation_alias=AliasChoices("versionId", "VersionId"))

    def summary(self) -> str:
        if not self.success:
            return f"Split failed: {self.error_message or self.message or 'unknown error'}"
        text = "Split complete"
        if self.train_count is not None and self.test_count is not None:
            text += f": {self.train_count} train / {self.test_count} test rows"
        if self.train_percentage is not None and self.test_percentage is not None:
            text += f" ({self.train_percentage:g}% / {self.test_percentage:g}%)"
        if self.message:
            text += f". {self.message}"
        return text
