"""Input sanitization helpers for request payloads and query strings."""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Iterable

_WHITESPACE_RE = re.compile(r"\s+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _strip_control_chars(value: str, *, allow_newlines: bool) -> str:
    return "".join(
        ch
        for ch in value
        if (ch == "\n" and allow_newlines) or unicodedata.category(ch) != "Cc"
    )


def clean_text(value: Any, *, allow_newlines: bool = False) -> Any:
    # Non-string input is left for the schema to reject with a typed error.
    if value is None or not isinstance(value, str):
        return value
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    value = _strip_control_chars(value, allow_newlines=allow_newlines).strip()
    if not allow_newlines:
        return _WHITESPACE_RE.sub(" ", value)
    value = "\n".join(line.rstrip() for line in value.split("\n"))
    return _BLANK_LINES_RE.sub("\n\n", value)


def clean_single_line(value: Any) -> Any:
    return clean_text(value, allow_newlines=False)


def clean_multiline(value: Any) -> Any:
    return clean_text(value, allow_newlines=True)


def clean_optional(value: Any) -> Any:
    cleaned = clean_single_line(value)
    return cleaned or None


def split_csv(values: Iterable[str] | str | None) -> list[str] | None:
    """Flatten repeated and comma separated query values, dropping blanks and duplicates."""
    if values is None:
        return None
    if isinstance(values, str):
        values = [values]
    items: list[str] = []
    seen: set[str] = set()
    for raw in values:
        for part in str(raw).split(","):
            item = clean_single_line(part)
            if not item or item in seen:
                continue
            seen.add(item)
            items.append(item)
    return items or None
