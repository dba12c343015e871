"""Package logger.

Every record carries a per-process run id so log lines from one CLI
invocation or one Streamlit server can be correlated.
"""
from __future__ import annotations

import logging
import sys
import uuid

from dspreview.config import settings

_RUN_ID = uuid.uuid4().hex[:12]


def get_run_id() -> str:
    """Return the correlation id of this process."""
    return _RUN_ID


class _RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID
        return True


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the ``dspreview`` logger once and return it."""
    pkg_logger = logging.getLogger("dspreview")
    pkg_logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))

    if not any(getattr(h, "_dspreview", False) for h in pkg_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [run %(run_id)s] %(message)s"
        ))
        handler.addFilter(_RunIdFilter())
        handler._dspreview = True  # type: ignore[attr-defined]
        pkg_logger.addHandler(handler)

    return pkg_logger


logger = setup_logging()
