"""
CSV loader — reads a screen CSV into ordered row mappings.

Rows are streamed with ``csv.DictReader`` so large files are never
held twice. Column counts are not pre-validated: short rows yield None
for the missing columns, extra values land under the ``None`` key.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator
from pathlib import Path

from screengen.core.errors import ParseError, StorageError

logger = logging.getLogger(__name__)


def iter_rows(path: Path) -> Iterator[dict[str, str | None]]:
    """Yield one mapping per data row, in file order.

    Raises:
        StorageError: The file is missing or unreadable.
        ParseError: The CSV is malformed (no header, unterminated quote).
    """
    if not path.is_file():
        raise StorageError(f"CSV file not found: {path}")

    try:
        with path.open(encoding="utf-8-sig", newline="") as fh:
            reader = csv.DictReader(fh, strict=True)
            if not reader.fieldnames:
                raise ParseError(f"CSV file has no header row: {path}")
            for row in reader:
                yield row
    except csv.Error as e:
        raise ParseError(f"Malformed CSV {path} near line {reader.line_num}: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"CSV file is not UTF-8: {path}: {e}") from e
    except OSError as e:
        raise StorageError(f"Cannot read {path}: {e}") from e


def load_rows(path: Path) -> list[dict[str, str | None]]:
    """Read every row of a CSV file.

    Returns:
        Row mappings keyed by header, preserving input order.
    """
    rows = list(iter_rows(path))
    logger.info("Loaded %d rows from %s", len(rows), path)
    return rows
