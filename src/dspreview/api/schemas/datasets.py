"""Dataset metadata DTOs: pure Pydantic, camelCase on the wire."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class Dataset(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "coerce_numbers_to_str": True}

    dataset_id: str
    dataset_name: str = ""
    description: str = ""
    file_type: str | None = None
    file_count: int = 0
    created_at: datetime | None = None
    file_path: str | None = None
