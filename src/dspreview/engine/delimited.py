"""Quote-aware tokenizer for delimited text.

Each ``"`` toggles the quoted state; doubled quotes are not an escape. An
unterminated quote swallows the rest of the line into the current field
instead of failing.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Sequence

_LINE_BREAK = re.compile(r"\r?\n")


def parse_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one line into trimmed fields, keeping empty trailing fields."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def parse_header(line: str, delimiter: str = ",") -> list[str]:
    """Like :func:`parse_line` but drops empty tokens.

    A header with trailing blank columns is therefore shorter than the data
    lines below it; rows are mapped by index against this shorter list.
    """
    return [name for name in parse_line(line, delimiter) if name]


def split_lines(text: str) -> list[str]:
    """Non-blank lines of *text*."""
    return [line for line in _LINE_BREAK.split(text) if line.strip()]


def _quote(value: Any, delimiter: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    if delimiter in text or "\n" in text:
        return f'"{text}"'
    return text


def to_delimited_text(
    headers: Sequence[str],
    rows: Iterable[Mapping[str, Any]],
    delimiter: str = ",",
) -> str:
    """Render rows back to delimited text, one line per row.

    Values containing the delimiter are wrapped in quotes so that
    :func:`parse_line` reads them back as a single field.
    """
    lines = [delimiter.join(_quote(h, delimiter) for h in headers)]
    for row in rows:
        lines.append(delimiter.join(_quote(row.get(h), delimiter) for h in headers))
    return "\n".join(lines)
