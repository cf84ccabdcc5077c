"""Reader for JSON with comments (JSONC).

Workspace files and folder settings files may contain ``//`` line comments,
``/* ... */`` block comments and trailing commas before ``}`` or ``]``.
``strip_jsonc()`` removes those so the text can go through ``json.loads``;
string literals are left untouched.
"""

from __future__ import annotations

import json
from typing import Any


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas from JSONC *text*.

    Raises:
        ValueError: If a block comment is not terminated.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]

        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue

        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue

        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ValueError(f"Unterminated block comment at offset {i}")
            i = end + 2
            continue

        if ch in "}]":
            _drop_trailing_comma(out)

        out.append(ch)
        i += 1

    return "".join(out)


def _drop_trailing_comma(out: list[str]) -> None:
    """Delete a ``,`` that is followed only by whitespace in *out*."""
    j = len(out) - 1
    while j >= 0 and out[j].isspace():
        j -= 1
    if j >= 0 and out[j] == ",":
        del out[j]


def loads(text: str) -> Any:
    """Parse JSONC *text*.

    A leading UTF-8 BOM is ignored.

    Raises:
        ValueError: If the text is not valid JSONC (``json.JSONDecodeError``
            is a ``ValueError`` subclass).
    """
    return json.loads(strip_jsonc(text.lstrip("\ufeff")))
