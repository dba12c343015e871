"""Page windows over preview rows.

Two modes share one paginator. In client mode the rows are held in memory
and the paginator computes the page count itself. In server mode every page
is a separate request and the paginator only checks and adopts the numbers
the server reports.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, TypeVar

from dspreview.domain.exceptions import PaginationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


class PaginationMode(str, Enum):
    CLIENT = "client"
    SERVER = "server"


def _check_page_size(page_size: int) -> int:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise PaginationError(f"Page size must be a positive integer, got {page_size!r}")
    return page_size


def total_pages_for(total_rows: int, page_size: int) -> int:
    """``ceil(total_rows / page_size)``, never less than 1."""
    _check_page_size(page_size)
    return max(1, math.ceil(max(total_rows, 0) / page_size))


def page_window(rows: Sequence[T], page: int, page_size: int) -> list[T]:
    """Rows of the 1-based *page*; empty when the page is past the end."""
    _check_page_size(page_size)
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(rows[start:start + page_size])


@dataclass(frozen=True, slots=True)
class ServerPage:
    total_rows: int
    current_page: int
    total_pages: int
    page_size: int


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def validate_server_page(
    *,
    total_rows: Any,
    current_page: Any,
    total_pages: Any,
    page_size: int,
    rows_on_page: int = 0,
) -> ServerPage:
    """Check server pagination numbers and correct the inconsistent ones.

    The total row count is trusted unless missing or negative. The page count
    must agree with ``ceil(total_rows / page_size)``; the current page is
    clamped into ``[1, total_pages]``.
    """
    _check_page_size(page_size)

    rows = _as_int(total_rows)
    if rows is None or rows < 0:
        logger.warning("Server reported invalid TotalRows=%r; using %d", total_rows, rows_on_page)
        rows = rows_on_page

    expected_pages = total_pages_for(rows, page_size)
    pages = _as_int(total_pages)
    if pages != expected_pages:
        if pages is not None:
            logger.warning(
                "Server reported TotalPages=%r for %d rows at page size %d; using %d",
                total_pages, rows, page_size, expected_pages,
            )
        pages = expected_pages

    page = _as_int(current_page)
    if page is None:
        page = 1
    clamped = min(max(page, 1), pages)
    if clamped != page:
        logger.warning("Server reported CurrentPage=%r outside 1..%d", current_page, pages)

    return ServerPage(total_rows=rows, current_page=clamped, total_pages=pages, page_size=page_size)


class PreviewPaginator:
    """Current page, page size and page count for one preview view.

    ``current_page`` is kept inside ``[1, total_pages]`` whenever the page
    size or the row count changes.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._page_size = _check_page_size(page_size)
        self._total_rows = 0
        self._current_page = 1
        self._mode = PaginationMode.CLIENT

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total_rows(self) -> int:
        return self._total_rows

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def mode(self) -> PaginationMode:
        return self._mode

    @property
    def total_pages(self) -> int:
        return total_pages_for(self._total_rows, self._page_size)

    def _clamp(self) -> None:
        self._current_page = min(max(self._current_page, 1), self.total_pages)

    def reset(self, total_rows: int) -> None:
        """Start over at page 1 in client mode."""
        self._mode = PaginationMode.CLIENT
        self._total_rows = max(total_rows, 0)
        self._current_page = 1

    def set_total_rows(self, total_rows: int) -> None:
        self._total_rows = max(total_rows, 0)
        self._clamp()

    def set_page_size(self, page_size: int) -> None:
        self._page_size = _check_page_size(page_size)
        self._clamp()

    def can_go_to(self, page: int) -> bool:
        return 1 <= page <= self.total_pages

    def change_page(self, page: int) -> bool:
        """Move to *page*; out-of-range pages leave the paginator unchanged."""
        if not self.can_go_to(page):
            return False
        self._current_page = page
        return True

    def apply_server_page(self, page: ServerPage) -> None:
        self._mode = PaginationMode.SERVER
        self._page_size = page.page_size
        self._total_rows = page.total_rows
        self._current_page = page.current_page
        self._clamp()

    def window(self, rows: Sequence[T]) -> list[T]:
        """Visible rows. In server mode *rows* already is the current page."""
        if self._mode is PaginationMode.SERVER:
            return list(rows)
        return page_window(rows, self._current_page, self._page_size)
