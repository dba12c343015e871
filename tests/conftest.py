"""Shared test fixtures.

  FakeSource / FakeSchemaSource  in-process sources with queued answers.
  make_client                    DatasetClient over an httpx.MockTransport.
"""
import httpx
import pytest

from dspreview.api_client import DatasetClient
from dspreview.services.sources import FetchResult

CSV_CONTENT = 'id,name\n1,Ann\n2,"B,ob"'


class FakeSource:
    """Answers fetches from a queue; the last answer repeats.

    An answer may be a payload, a FetchResult, an exception to raise, or a
    callable ``(dataset_id, page, page_size) -> answer``.
    """

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = []

    def fetch(self, dataset_id, *, page, page_size, row_hint=None):
        self.calls.append({"dataset_id": dataset_id, "page": page, "page_size": page_size, "row_hint": row_hint})
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if callable(answer) and not isinstance(answer, type):
            answer = answer(dataset_id, page, page_size)
        if isinstance(answer, Exception):
            raise answer
        return answer if isinstance(answer, FetchResult) else FetchResult(answer)


class FakeSchemaSource:
    def __init__(self, answer):
        self.answer = answer
        self.calls = []

    def fetch_schema(self, dataset_id):
        self.calls.append(dataset_id)
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer


@pytest.fixture
def content_payload():
    return {"content": CSV_CONTENT}


@pytest.fixture
def people_rows():
    return [
        {"id": i, "name": f"person-{i}", "active": i % 2 == 0}
        for i in range(1, 26)
    ]


@pytest.fixture
def make_client():
    """Build a DatasetClient whose requests are answered by *handler*."""
    clients = []

    def _make(handler, **kwargs):
        client = DatasetClient(base_url="http://test", transport=httpx.MockTransport(handler), **kwargs)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()
