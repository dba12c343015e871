import json
import sys
from pathlib import Path
from typing import Optional

import typer

from dspreview.api.schemas.operations import SplitRequest
from dspreview.api_client import DatasetClient
from dspreview.config import settings
from dspreview.engine.delimited import to_delimited_text
from dspreview.engine.table import PreviewTable, format_cell
from dspreview.logging import get_run_id, logger
from dspreview.services.preview_service import PreviewService
from dspreview.services.sources import SOURCE_KINDS, ClientSchemaSource, StaticPayloadSource, build_source

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main():
    """
    Dataset preview and schema CLI.
    """
    pass


def _read_payload(path: Path) -> bytes:
    # The engine decides between JSON and delimited text.
    return path.read_bytes()


def _print_rows(headers, rows) -> None:
    if not headers:
        print("(no columns)")
        return
    cells = [[format_cell(row.get(h)) for h in headers] for row in rows]
    widths = [max([len(h)] + [len(line[i]) for line in cells]) for i, h in enumerate(headers)]
    print("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    print("  ".join("─" * w for w in widths))
    for line in cells:
        print("  ".join(c.ljust(w) for c, w in zip(line, widths)))


def _print_status(table: PreviewTable) -> None:
    if table.is_fallback:
        print(f"❌ Fallback table ({table.error or 'no reason recorded'})")
    elif table.is_empty_result:
        print("✅ Loaded: dataset returned no rows")
    else:
        print(f"✅ Loaded {table.row_count} rows of {table.total_rows} (shape: {table.shape})")


def _print_schema(table: PreviewTable) -> None:
    print(json.dumps([col.to_dict() for col in table.schema], indent=2, default=str))


def _remote_service(source: str) -> tuple[DatasetClient, PreviewService]:
    client = DatasetClient()
    service = PreviewService.from_settings(build_source(source, client), ClientSchemaSource(client))
    return client, service


@app.command(name="doctor")
def doctor():
    """
    Check configuration and backend reachability.
    """
    logger.info("Running doctor check...")

    failures: list[str] = []
    passed = 0

    print("\n🩺 Dataset Preview Doctor\n")

    # ── Environment ─────────────────────────────────────────────────────────
    print("[Environment]")
    print(f"  Python: {sys.version.split()[0]}")
    print(f"  Run ID: {get_run_id()}")
    passed += 1

    # ── Configuration ───────────────────────────────────────────────────────
    print("\n[Configuration]")
    print(f"  DATASET_API_URL:        {settings.DATASET_API_URL}")
    token_set = bool(settings.DATASET_API_TOKEN and settings.DATASET_API_TOKEN.get_secret_value())
    print(f"  DATASET_API_TOKEN:      {'Set' if token_set else 'Not set'}")
    print(f"  PREVIEW_PAGE_SIZE:      {settings.PREVIEW_PAGE_SIZE}")
    print(f"  PREVIEW_FALLBACK:       {settings.PREVIEW_FALLBACK.value}")
    print(f"  SCHEMA_SCAN_ROWS:       {settings.SCHEMA_SCAN_ROWS}")
    if settings.PREVIEW_PAGE_SIZE >= 1 and settings.SCHEMA_SCAN_ROWS >= 1:
        print("  Limits:                 ✅ Positive")
        passed += 1
    else:
        print("  Limits:                 ❌ Page size and scan window must be >= 1")
        failures.append("PREVIEW_PAGE_SIZE and SCHEMA_SCAN_ROWS must be positive")

    # ── Backend ─────────────────────────────────────────────────────────────
    print("\n[Backend]")
    try:
        with DatasetClient() as client:
            status = client.health().get("status", "ok")
        print(f"  /health                 ✅ {status}")
        passed += 1
    except Exception as e:
        logger.warning(f"Health check failed: {e}")
        print(f"  /health                 ❌ {e}")
        failures.append(f"Backend at {settings.DATASET_API_URL} is not reachable")

    # ── Summary ─────────────────────────────────────────────────────────────
    total = passed + len(failures)
    print(f"\n{'─' * 50}")
    if failures:
        print(f"Result: {passed}/{total} checks passed\n")
        for msg in failures:
            print(f"  ❌ {msg}")
        print()
        raise typer.Exit(code=1)
    else:
        print(f"Result: {passed}/{total} checks passed, all good ✅")
        print()


@app.command(name="preview")
def preview(
    dataset_id: str,
    source: str = typer.Option("preview", help=f"One of: {', '.join(SOURCE_KINDS)}"),
    page: int = typer.Option(1, min=1),
    page_size: Optional[int] = typer.Option(None, min=1),
):
    """Load a dataset preview and print one page."""
    if source not in SOURCE_KINDS:
        print(f"❌ Unknown source {source!r}")
        raise typer.Exit(code=1)
    client, service = _remote_service(source)
    with client:
        if page_size is not None:
            service.set_page_size(page_size)
        service.load(dataset_id)
        if page != 1 and not service.change_page(page):
            print(f"❌ Page {page} is outside 1..{service.paginator.total_pages}")
            raise typer.Exit(code=1)
        table = service.table
        _print_rows(table.headers, service.paged_rows)
        print(f"\nPage {service.paginator.current_page}/{service.paginator.total_pages}")
        _print_status(table)


@app.command(name="schema")
def schema(dataset_id: str):
    """Print the resolved column schema of a dataset as JSON."""
    client, service = _remote_service("preview")
    with client:
        table = service.load(dataset_id)
    _print_schema(table)
    if table.is_fallback:
        logger.warning(f"Schema for {dataset_id} comes from a fallback table: {table.error}")


@app.command(name="info")
def info(dataset_id: str):
    """Show dataset metadata."""
    try:
        with DatasetClient() as client:
            dataset = client.get_dataset(dataset_id)
    except Exception as e:
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)
    print(json.dumps(dataset.model_dump(mode="json"), indent=2))


@app.command(name="inspect")
def inspect(path: Path = typer.Argument(..., exists=True, dir_okay=False)):
    """Normalize a local JSON or delimited file and show what the engine sees."""
    service = PreviewService.from_settings(StaticPayloadSource(_read_payload(path)))
    table = service.load(path.name)
    print(f"Headers: {', '.join(table.headers) or '(none)'}")
    print(f"Status:  {table.status.value}")
    print(f"Shape:   {table.shape or '-'}")
    print(f"Rows:    {table.row_count} (total {table.total_rows})")
    print("\nSchema:")
    _print_schema(table)
    if table.is_fallback:
        raise typer.Exit(code=1)


@app.command(name="export")
def export(
    path: Path = typer.Argument(..., exists=True, dir_okay=False),
    output: Path = typer.Argument(...),
    delimiter: str = typer.Option(","),
):
    """Normalize a local payload file and write it as delimited text."""
    service = PreviewService.from_settings(StaticPayloadSource(_read_payload(path)))
    table = service.load(path.name)
    if table.is_fallback:
        print(f"❌ Could not read {path}: {table.error}")
        raise typer.Exit(code=1)
    output.write_text(to_delimited_text(table.headers, table.rows, delimiter) + "\n", encoding="utf-8")
    logger.info(f"Exported {table.row_count} rows from {path} to {output}")
    print(f"✅ Wrote {table.row_count} rows to {output}")


@app.command(name="validate")
def validate(dataset_id: str):
    """Validate a dataset and show the result inside its preview."""
    client, service = _remote_service("preview")
    with client:
        try:
            result = client.validate_dataset(dataset_id)
        except Exception as e:
            logger.error(f"Validation failed: {e}")
            print(f"❌ Failed: {e}")
            raise typer.Exit(code=1)
        service.load(dataset_id)
        service.apply_validation_result(result)
    _print_rows(service.headers, service.paged_rows)
    print(f"\n{result.summary()}")


@app.command(name="split")
def split(
    dataset_id: str,
    train_ratio: float = typer.Option(0.8, min=0.0, max=1.0),
    shuffle: bool = typer.Option(True),
    stratify_by: Optional[str] = typer.Option(None),
):
    """Split a dataset into train/test sets and show the result."""
    request = SplitRequest(
        train_ratio=train_ratio,
        test_ratio=round(1.0 - train_ratio, 6),
        shuffle=shuffle,
        stratify_by=stratify_by,
    )
    client, service = _remote_service("preview")
    with client:
        try:
            result = client.split_dataset(dataset_id, request)
        except Exception as e:
            logger.error(f"Split failed: {e}")
            print(f"❌ Failed: {e}")
            raise typer.Exit(code=1)
        service.load(dataset_id)
        service.apply_split_result(result)
    print(result.summary())
    if not result.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
