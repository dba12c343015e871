import httpx
import pytest

from dspreview.api.schemas.operations import SplitResult, ValidationResult
from dspreview.config import settings
from dspreview.domain.exceptions import DatasetPreviewError, PaginationError
from dspreview.engine.fallback import FallbackPolicy
from dspreview.engine.pagination import PaginationMode, validate_server_page
from dspreview.engine.table import ROW_NUMBER_KEY, SYNTHETIC_KEY, ColumnType, TableStatus
from dspreview.services.preview_service import PreviewService
from dspreview.services.sources import FetchResult

from conftest import FakeSchemaSource, FakeSource


def test_load_content_payload(content_payload):
    service = PreviewService(FakeSource(content_payload))
    table = service.load("ds")

    assert table is service.table
    assert table.status is TableStatus.LOADED
    assert table.shape == "content_text"
    assert service.headers == ("id", "name")
    assert table.rows[1] == {ROW_NUMBER_KEY: 2, "id": "2", "name": "B,ob"}
    assert service.total_rows == 2
    assert [c.type for c in service.schema] == [ColumnType.NUMBER, ColumnType.CATEGORY]
    assert service.has_data
    assert service.row_count == 2


def test_row_hint_and_page_size_reach_the_source():
    source = FakeSource([])
    PreviewService(source, page_size=5, row_hint=100).load("ds")
    assert source.calls == [{"dataset_id": "ds", "page": 1, "page_size": 5, "row_hint": 100}]


def test_transport_failure_applies_mock_fallback():
    service = PreviewService(FakeSource(httpx.ConnectError("refused")))
    table = service.load("ds")

    assert table.is_fallback
    assert "refused" in table.error
    assert table.headers == ("id", "name", "age", "email", "isActive")
    assert len(service.paged_rows) == 5


def test_unrecognized_payload_applies_configured_fallback():
    service = PreviewService(FakeSource({"weird": 1}), fallback_policy=FallbackPolicy.EMPTY)
    table = service.load("ds")
    assert table.is_fallback
    assert not table.has_data
    assert table.error == "Unrecognized preview payload"


def test_empty_result_is_not_a_failure():
    table = PreviewService(FakeSource({"data": []})).load("ds")
    assert table.is_empty_result
    assert not table.is_fallback


def test_stale_result_is_discarded():
    class ReentrantSource:
        service = None

        def fetch(self, dataset_id, *, page, page_size, row_hint=None):
            if dataset_id == "A":
                # B is issued and completes while A is still in flight
                self.service.load("B")
                return FetchResult([{"src": "A"}])
            return FetchResult([{"src": "B"}])

    source = ReentrantSource()
    service = PreviewService(source)
    source.service = service

    service.load("A")
    assert service.table.rows == ({"src": "B"},)
    assert service.dataset_id == "B"


def test_stale_failure_is_discarded():
    class ReentrantSource:
        service = None

        def fetch(self, dataset_id, *, page, page_size, row_hint=None):
            if dataset_id == "A":
                self.service.load("B")
                raise httpx.ReadTimeout("slow")
            return FetchResult([{"src": "B"}])

    source = ReentrantSource()
    service = PreviewService(source)
    source.service = service

    service.load("A")
    assert service.table.status is TableStatus.LOADED
    assert service.table.rows == ({"src": "B"},)


def test_schema_reload_during_refresh_does_not_drop_new_rows():
    class ReloadingSchemaSource:
        service = None
        reloading = False
        calls = 0

        def fetch_schema(self, dataset_id):
            self.calls += 1
            # the user hits "reload schema" while the refresh resolves its own
            if self.calls == 2 and not self.reloading:
                self.reloading = True
                self.service.reload_schema()
            return {"fields": [{"name": "v", "type": "number"}]}

    schema_source = ReloadingSchemaSource()
    service = PreviewService(FakeSource([{"v": 1}], [{"v": 2}]), schema_source)
    schema_source.service = service

    service.load("ds")
    assert service.table.rows == ({"v": 1},)

    service.refresh()
    assert service.table.rows == ({"v": 2},)
    assert service.schema[0].type is ColumnType.NUMBER


def test_client_side_paging(people_rows):
    service = PreviewService(FakeSource(people_rows), page_size=10)
    service.load("ds")

    assert service.paginator.total_pages == 3
    assert service.change_page(3)
    assert [row["id"] for row in service.paged_rows] == [21, 22, 23, 24, 25]
    assert not service.change_page(4)
    assert service.paginator.current_page == 3

    service.set_page_size(25)
    assert service.paginator.current_page == 1
    assert len(service.paged_rows) == 25


def test_invalid_page_size_raises(people_rows):
    service = PreviewService(FakeSource(people_rows))
    with pytest.raises(PaginationError):
        service.set_page_size(0)


def test_refresh_keeps_page_when_possible(people_rows):
    source = FakeSource(people_rows, people_rows, people_rows[:5])
    service = PreviewService(source, page_size=10)
    service.load("ds")
    service.change_page(2)

    service.refresh()
    assert service.paginator.current_page == 2
    assert source.calls[-1]["page"] == 2

    service.refresh()
    assert service.paginator.current_page == 1


def test_load_resets_to_first_page(people_rows):
    service = PreviewService(FakeSource(people_rows), page_size=10)
    service.load("ds")
    service.change_page(3)
    service.load("other")
    assert service.paginator.current_page == 1


def test_refresh_without_dataset():
    with pytest.raises(DatasetPreviewError):
        PreviewService(FakeSource([])).refresh()


def _server_pages(total):
    def answer(dataset_id, page, page_size):
        start = (page - 1) * page_size
        rows = [{"n": i} for i in range(start, min(start + page_size, total))]
        server_page = validate_server_page(
            total_rows=total, current_page=page, total_pages=None, page_size=page_size, rows_on_page=len(rows),
        )
        return FetchResult({"data": rows, "totalRows": total}, server_page)

    return answer


def test_server_side_paging_fetches_each_page():
    source = FakeSource(_server_pages(23))
    service = PreviewService(source, page_size=10)
    service.load("ds")

    assert service.paginator.mode is PaginationMode.SERVER
    assert service.paginator.total_pages == 3
    assert service.total_rows == 23

    assert service.change_page(3)
    assert source.calls[-1]["page"] == 3
    assert [row["n"] for row in service.paged_rows] == [20, 21, 22]

    assert not service.change_page(4)
    assert len(source.calls) == 2


def test_server_side_page_size_change_refetches():
    source = FakeSource(_server_pages(23))
    service = PreviewService(source, page_size=10)
    service.load("ds")
    service.change_page(2)

    service.set_page_size(5)
    assert source.calls[-1] == {"dataset_id": "ds", "page": 1, "page_size": 5, "row_hint": None}
    assert service.paginator.total_pages == 5
    assert len(service.paged_rows) == 5


def test_explicit_schema_is_used():
    schema_source = FakeSchemaSource([{"name": "code", "type": "text", "nullable": False}])
    service = PreviewService(FakeSource([{"code": "a"}, {"code": "b"}]), schema_source)
    service.load("ds")

    assert schema_source.calls == ["ds"]
    assert service.schema[0].type is ColumnType.STRING
    assert service.schema[0].sample_values == ("a", "b")


def test_schema_source_failure_falls_back_to_inference():
    schema_source = FakeSchemaSource(httpx.ConnectError("down"))
    service = PreviewService(FakeSource([{"code": "a"}, {"code": "b"}]), schema_source)
    table = service.load("ds")

    assert table.status is TableStatus.LOADED
    assert service.schema[0].type is ColumnType.CATEGORY


def test_reload_schema():
    schema_source = FakeSchemaSource(httpx.ConnectError("down"))
    service = PreviewService(FakeSource([{"code": "a"}]), schema_source)
    service.load("ds")

    schema_source.answer = {"fields": [{"name": "code", "type": "string"}]}
    assert service.reload_schema()[0].type is ColumnType.STRING
    assert service.table.rows == ({"code": "a"},)


def test_validation_result_becomes_single_synthetic_row(people_rows):
    service = PreviewService(FakeSource(people_rows[:3]))
    service.load("ds")

    service.apply_validation_result(ValidationResult.model_validate({"status": "passed", "totalRows": 3}))
    service.apply_validation_result("Validation error: 1 errors in 3 rows")

    synthetic = [row for row in service.table.rows if SYNTHETIC_KEY in row]
    assert len(synthetic) == 1
    assert synthetic[0]["ValidationSummary"] == "Validation error: 1 errors in 3 rows"
    assert service.row_count == 3
    assert service.total_rows == 3
    assert service.paged_rows[-1] is synthetic[0]


def test_split_result_annotation(people_rows):
    service = PreviewService(FakeSource(people_rows[:2]))
    service.load("ds")
    service.apply_split_result(SplitResult.model_validate({"trainCount": 1, "testCount": 1}))
    assert service.headers[-1] == "SplitSummary"
    assert service.table.rows[-1]["SplitSummary"] == "Split complete: 1 train / 1 test rows"


def test_from_settings_uses_configuration():
    service = PreviewService.from_settings(FakeSource([]))
    assert service.paginator.page_size == settings.PREVIEW_PAGE_SIZE
