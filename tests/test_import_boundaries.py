"""
Import boundary guard for the preview engine.

Rules:
- ``dspreview.engine`` is pure computation: no transport, no UI, no settings,
  and nothing from the layers built on top of it.
- Wire DTOs in ``dspreview.api.schemas`` never import the HTTP client.
- Services never import streamlit.
"""

import ast
from collections.abc import Callable
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent
PACKAGE_ROOT = REPO_ROOT / "src" / "dspreview"

ENGINE_BANNED_MODULES = {"httpx", "streamlit", "typer"}
ENGINE_BANNED_PREFIXES = (
    "dspreview.config",
    "dspreview.api",
    "dspreview.services",
    "dspreview.ui",
    "dspreview.cli",
)


def _imports(path: Path) -> list[str]:
    """Every module name imported by *path*, via AST."""
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    names: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            names.append(node.module or "")
    return names


def _violations(root: Path, is_banned: Callable[[str], bool]) -> list[str]:
    return [
        f"{py_file.relative_to(REPO_ROOT).as_posix()}: {name}"
        for py_file in sorted(root.rglob("*.py"))
        for name in _imports(py_file)
        if is_banned(name)
    ]


def _engine_banned(module_name: str) -> bool:
    if module_name.split(".")[0] in ENGINE_BANNED_MODULES:
        return True
    return any(module_name.startswith(prefix) for prefix in ENGINE_BANNED_PREFIXES)


def test_engine_import_boundaries() -> None:
    violations = _violations(PACKAGE_ROOT / "engine", _engine_banned)
    assert not violations, "Engine modules must stay free of I/O layers:\n" + "\n".join(
        f"  {v}" for v in violations
    )


def test_schema_import_boundaries() -> None:
    violations = _violations(
        PACKAGE_ROOT / "api" / "schemas",
        lambda m: m.startswith("httpx") or m.startswith("dspreview.api_client"),
    )
    assert not violations, "DTO modules must not import the HTTP client:\n" + "\n".join(violations)


def test_service_import_boundaries() -> None:
    violations = _violations(PACKAGE_ROOT / "services", lambda m: m.startswith("streamlit"))
    assert not violations, "Service files must not import streamlit:\n" + "\n".join(violations)
