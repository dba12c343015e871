import pytest

from dspreview.domain.exceptions import PaginationError
from dspreview.engine.pagination import (
    PaginationMode,
    PreviewPaginator,
    ServerPage,
    page_window,
    total_pages_for,
    validate_server_page,
)


@pytest.mark.parametrize(
    "total, size, pages",
    [(0, 10, 1), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3), (100, 7, 15)],
)
def test_total_pages(total, size, pages):
    assert total_pages_for(total, size) == pages


@pytest.mark.parametrize("size", [0, -1, True, 2.5])
def test_invalid_page_size(size):
    with pytest.raises(PaginationError):
        total_pages_for(10, size)
    with pytest.raises(PaginationError):
        PreviewPaginator(size)


def test_page_window():
    rows = list(range(25))
    assert page_window(rows, 1, 10) == list(range(10))
    assert page_window(rows, 3, 10) == [20, 21, 22, 23, 24]
    assert page_window(rows, 4, 10) == []
    assert page_window(rows, 0, 10) == []


def test_change_page_outside_range_is_a_no_op():
    paginator = PreviewPaginator(10)
    paginator.reset(25)
    assert paginator.change_page(3)
    assert not paginator.change_page(4)
    assert not paginator.change_page(0)
    assert paginator.current_page == 3


def test_page_size_change_clamps_current_page():
    paginator = PreviewPaginator(10)
    paginator.reset(25)
    paginator.change_page(3)
    paginator.set_page_size(25)
    assert paginator.total_pages == 1
    assert paginator.current_page == 1


def test_shrinking_row_count_clamps_current_page():
    paginator = PreviewPaginator(5)
    paginator.reset(20)
    paginator.change_page(4)
    paginator.set_total_rows(6)
    assert paginator.current_page == 2


def test_client_window():
    paginator = PreviewPaginator(2)
    rows = ["a", "b", "c"]
    paginator.reset(len(rows))
    paginator.change_page(2)
    assert paginator.window(rows) == ["c"]


def test_server_page_is_adopted_and_window_is_passthrough():
    paginator = PreviewPaginator(10)
    paginator.apply_server_page(ServerPage(total_rows=120, current_page=4, total_pages=12, page_size=10))
    assert paginator.mode is PaginationMode.SERVER
    assert paginator.current_page == 4
    assert paginator.total_pages == 12
    assert paginator.window(["x", "y"]) == ["x", "y"]

    paginator.reset(3)
    assert paginator.mode is PaginationMode.CLIENT


def test_validate_server_page_consistent():
    page = validate_server_page(total_rows=120, current_page=2, total_pages=12, page_size=10)
    assert page == ServerPage(120, 2, 12, 10)


def test_validate_server_page_corrects_inconsistencies():
    page = validate_server_page(total_rows="120", current_page=50, total_pages=99, page_size=10)
    assert page == ServerPage(120, 12, 12, 10)


def test_validate_server_page_missing_total_uses_rows_on_page():
    page = validate_server_page(
        total_rows=None, current_page=None, total_pages=None, page_size=10, rows_on_page=7,
    )
    assert page == ServerPage(7, 1, 1, 10)
