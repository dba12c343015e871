import json

import httpx
from typer.testing import CliRunner

from dspreview.api_client import DatasetClient
from dspreview.cli import app

runner = CliRunner()


def _patch_client(monkeypatch, handler):
    def factory(*args, **kwargs):
        return DatasetClient(base_url="http://test", transport=httpx.MockTransport(handler))

    monkeypatch.setattr("dspreview.cli.DatasetClient", factory)


def test_inspect_delimited_file(tmp_path):
    path = tmp_path / "people.csv"
    path.write_text('id,name\n1,Ann\n2,"B,ob"\n', encoding="utf-8")

    result = runner.invoke(app, ["inspect", str(path)])

    assert result.exit_code == 0, result.output
    assert "Headers: id, name" in result.output
    assert "Status:  loaded" in result.output
    assert '"type": "number"' in result.output
    assert '"type": "category"' in result.output


def test_inspect_unrecognized_json_exits_nonzero(tmp_path):
    path = tmp_path / "odd.json"
    path.write_text(json.dumps({"foo": 1}), encoding="utf-8")

    result = runner.invoke(app, ["inspect", str(path)])

    assert result.exit_code == 1
    assert "Status:  fallback" in result.output


def test_export_writes_delimited_text(tmp_path):
    source = tmp_path / "rows.json"
    source.write_text(json.dumps([{"id": 1, "name": "B,ob"}, {"id": 2, "name": None}]), encoding="utf-8")
    output = tmp_path / "rows.csv"

    result = runner.invoke(app, ["export", str(source), str(output)])

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8") == 'id,name\n1,"B,ob"\n2,\n'


def test_export_refuses_fallback_data(tmp_path):
    source = tmp_path / "odd.json"
    source.write_text(json.dumps({"foo": 1}), encoding="utf-8")
    output = tmp_path / "out.csv"

    result = runner.invoke(app, ["export", str(source), str(output)])

    assert result.exit_code == 1
    assert not output.exists()


def test_doctor_reports_healthy_backend(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(200, json={"status": "Healthy"}))
    result = runner.invoke(app, ["doctor"])
    assert result.exit_code == 0, result.output
    assert "Healthy" in result.output


def test_doctor_fails_when_backend_is_down(monkeypatch):
    _patch_client(monkeypatch, lambda request: httpx.Response(503, text="unavailable"))
    result = runner.invoke(app, ["doctor"])
    assert result.exit_code == 1
    assert "not reachable" in result.output


def test_preview_command(monkeypatch):
    def handler(request):
        if request.url.path == "/api/Dataset/7/preview":
            return httpx.Response(200, json={"data": [{"a": 1}, {"a": 2}], "totalRows": 2})
        return httpx.Response(404, json={"detail": "no schema"})

    _patch_client(monkeypatch, handler)
    result = runner.invoke(app, ["preview", "7"])

    assert result.exit_code == 0, result.output
    assert "Page 1/1" in result.output
    assert "Loaded 2 rows of 2" in result.output


def test_preview_rejects_unknown_source():
    result = runner.invoke(app, ["preview", "7", "--source", "ftp"])
    assert result.exit_code == 1


def test_validate_command_shows_summary(monkeypatch):
    def handler(request):
        if request.method == "POST":
            return httpx.Response(200, json={"status": "warning", "errorCount": 1, "totalRows": 2})
        if request.url.path.endswith("/preview"):
            return httpx.Response(200, json=[{"a": 1}, {"a": 2}])
        return httpx.Response(404, json={"detail": "no schema"})

    _patch_client(monkeypatch, handler)
    result = runner.invoke(app, ["validate", "7"])

    assert result.exit_code == 0, result.output
    assert "Validation warning: 1 errors in 2 rows" in result.output
    assert "ValidationSummary" in result.output
