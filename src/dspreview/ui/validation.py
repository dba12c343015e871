"""Pre-flight checks for the Streamlit UI."""
from typing import List

from dspreview.config import settings


def validate_settings() -> List[str]:
    """Check the configured limits the preview depends on."""
    errors = []
    if settings.PREVIEW_PAGE_SIZE < 1:
        errors.append(f"PREVIEW_PAGE_SIZE must be >= 1, got {settings.PREVIEW_PAGE_SIZE}")
    if settings.SCHEMA_SCAN_ROWS < 1:
        errors.append(f"SCHEMA_SCAN_ROWS must be >= 1, got {settings.SCHEMA_SCAN_ROWS}")
    if settings.SAMPLE_VALUE_LIMIT < 0:
        errors.append(f"SAMPLE_VALUE_LIMIT must be >= 0, got {settings.SAMPLE_VALUE_LIMIT}")
    return errors


def validate_backend_connection(base_url: str | None = None) -> List[str]:
    """Validate that the dataset backend is reachable."""
    errors = []
    try:
        from dspreview.api_client import DatasetClient
        with DatasetClient(base_url=base_url) as client:
            client.health()
    except Exception as e:
        errors.append(f"Backend connection failed: {e}")
    return errors


def run_all_checks() -> List[str]:
    """Run all validation checks."""
    errors = []
    errors.extend(validate_settings())
    errors.extend(validate_backend_connection())
    return errors
