"""Runtime configuration loaded from the environment and ``.env``."""
from __future__ import annotations

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from dspreview.engine.fallback import FallbackPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend
    DATASET_API_URL: str = "http://localhost:5183"
    DATASET_API_TOKEN: SecretStr | None = None
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Preview
    PREVIEW_ROW_HINT: int = 100
    PREVIEW_PAGE_SIZE: int = 10
    PREVIEW_FALLBACK: FallbackPolicy = FallbackPolicy.MOCK

    # Schema inference
    SAMPLE_VALUE_LIMIT: int = 5
    SCHEMA_SCAN_ROWS: int = 100
    CATEGORY_MAX_DISTINCT: int = 10
    LENIENT_DATES: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()
