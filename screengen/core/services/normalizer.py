"""
Row normalizer — raw CSV strings in, typed ScreenDescriptor out.

Conversions:
    y / n flags        →  bool (case-insensitive, blank means default)
    comma lists        →  list[str], items trimmed, blanks dropped
    JSON sample cells  →  parsed value (None when blank)

Any problem with a row raises DataError; callers skip the row and go on.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from screengen.core.errors import DataError
from screengen.core.models.screen import Created, ScreenDescriptor

_TRUE = {"y", "yes"}
_FALSE = {"n", "no"}


def _cell(row: Mapping[Any, Any], column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value).strip()


def parse_flag(value: str, default: bool, column: str) -> bool:
    """Parse a y/n flag cell."""
    if not value:
        return default
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise DataError(f"Column '{column}' expects y/n, got {value!r}")


def parse_list(value: str) -> list[str]:
    """Split a comma-delimited cell."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_json(value: str, column: str) -> Any:
    """Parse a JSON cell; blank cells yield None."""
    if not value:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise DataError(f"Column '{column}' is not valid JSON: {e}") from e


def normalize(row: Mapping[Any, Any], index: int = 0) -> ScreenDescriptor:
    """Map one raw CSV row onto a ScreenDescriptor.

    Screen-oriented CSVs name rows with ``screen``; it is used when
    ``name`` is absent.

    Raises:
        DataError: Missing name/directory, bad flag or malformed JSON.
    """
    name = _cell(row, "name") or _cell(row, "screen")
    if not name:
        raise DataError(f"Row {index}: missing required column 'name'")

    directory = _cell(row, "directory")
    if not directory:
        raise DataError(f"Row {index} ({name}): missing required column 'directory'")

    try:
        is_get = parse_flag(_cell(row, "isGet"), False, "isGet")
        has_req_body = parse_flag(_cell(row, "hasReqBody"), False, "hasReqBody")
        created = parse_flag(_cell(row, "created"), False, "created")
        response_sample = parse_json(_cell(row, "response_sample"), "response_sample")
        request_sample = (
            parse_json(_cell(row, "request_sample"), "request_sample") if has_req_body else None
        )
    except DataError as e:
        raise DataError(f"Row {index} ({name}): {e}") from e

    try:
        return ScreenDescriptor(
            index=index,
            name=name,
            directory=directory,
            route=_cell(row, "route"),
            route_mock_sample=_cell(row, "route_mock_sample"),
            is_get=is_get,
            has_req_body=has_req_body,
            request_args=parse_list(_cell(row, "args")),
            response_sample=response_sample,
            request_sample=request_sample,
            created=Created.YES if created else Created.NO,
            controller=_cell(row, "controller") or "none",
            chunk=_cell(row, "chunk"),
            type=_cell(row, "type") or "GET",
            description=_cell(row, "description"),
            parent=_cell(row, "parent"),
        )
    except ValidationError as e:
        reasons = "; ".join(err["msg"] for err in e.errors())
        raise DataError(f"Row {index} ({name}): {reasons}") from e
