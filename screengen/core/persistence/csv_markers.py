"""
CSV write-back — flips the ``created`` column of generated rows to ``y``.

The source CSV is re-read as raw records and only the ``created`` cell
of each target row is patched; every other cell, including values past
the last header column, is written back untouched. A ``created`` column
is appended to the header if the file had none.

Data-row indexes count the way ``csv.DictReader`` does: blank lines
are not rows.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterable
from pathlib import Path

from screengen.core.errors import ParseError, StorageError
from screengen.core.models.screen import Created
from screengen.core.persistence.atomic import atomic_write_text

logger = logging.getLogger(__name__)

CREATED_COLUMN = "created"


def _read_records(path: Path) -> list[list[str]]:
    if not path.is_file():
        raise StorageError(f"CSV file not found: {path}")
    try:
        with path.open(encoding="utf-8-sig", newline="") as fh:
            records = list(csv.reader(fh, strict=True))
    except csv.Error as e:
        raise ParseError(f"Malformed CSV {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"CSV file is not UTF-8: {path}: {e}") from e
    except OSError as e:
        raise StorageError(f"Cannot read {path}: {e}") from e

    if not records:
        raise ParseError(f"CSV file has no header row: {path}")
    return records


def _set_cell(record: list[str], column: int, value: str, insert: bool) -> None:
    if len(record) < column:
        record.extend([""] * (column - len(record)))
    if insert or len(record) == column:
        record.insert(column, value)
    else:
        record[column] = value


def mark_created(path: Path, indexes: Iterable[int]) -> int:
    """Set ``created = y`` on the given data rows.

    Returns:
        Number of rows whose marker changed.

    Raises:
        StorageError / ParseError: The CSV cannot be read back or rewritten.
    """
    targets = set(indexes)
    if not targets:
        return 0

    records = _read_records(path)
    header = records[0]
    new_column = CREATED_COLUMN not in header
    if new_column:
        column = len(header)
        header.append(CREATED_COLUMN)
    else:
        column = header.index(CREATED_COLUMN)

    changed = 0
    data_index = -1
    for record in records[1:]:
        if not record:
            continue
        data_index += 1

        if data_index not in targets:
            if new_column:
                _set_cell(record, column, "", insert=True)
            continue

        current = "" if new_column or column >= len(record) else record[column]
        if current.strip().lower() != Created.YES.value:
            changed += 1
        _set_cell(record, column, Created.YES.value, insert=new_column)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(records)

    atomic_write_text(path, buffer.getvalue(), prefix=".csv_")
    logger.info("Marked %d row(s) created in %s", changed, path)
    return changed
