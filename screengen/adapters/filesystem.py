"""
Filesystem adapter — directory creation and file writes for generated code.

Every OSError is re-raised as StorageError so callers handle one type.
"""

from __future__ import annotations

import logging
from pathlib import Path

from screengen.core.errors import ConflictError, StorageError
from screengen.core.models.template import WriteMode

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> bool:
    """Create ``path`` and any missing parents.

    Returns:
        True if the directory was created, False if it already existed.

    Raises:
        StorageError: Permission problem or a non-directory in the way.
    """
    path = Path(path)
    if path.is_dir():
        return False

    try:
        # exist_ok tolerates a concurrent creator winning the race
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Cannot create directory {path}: {e}") from e

    logger.info("Created directory %s", path)
    return True


def write_file(path: Path, content: str, mode: WriteMode = WriteMode.FAIL_IF_EXISTS) -> None:
    """Write ``content`` to ``path`` according to ``mode``.

    Raises:
        ConflictError: ``mode`` is FAIL_IF_EXISTS and the file exists.
        StorageError: The write failed.
    """
    path = Path(path)
    open_mode = {
        WriteMode.OVERWRITE: "w",
        WriteMode.APPEND: "a",
        WriteMode.FAIL_IF_EXISTS: "x",
    }[WriteMode(mode)]

    try:
        with path.open(open_mode, encoding="utf-8", newline="") as fh:
            fh.write(content)
    except FileExistsError as e:
        raise ConflictError(f"File already exists: {path}") from e
    except OSError as e:
        raise StorageError(f"Cannot write {path}: {e}") from e

    logger.debug("Wrote %d chars to %s (%s)", len(content), path, WriteMode(mode).value)


def check_writable(path: Path, mode: WriteMode) -> None:
    """Fail early if a FAIL_IF_EXISTS write to ``path`` would conflict."""
    if WriteMode(mode) is WriteMode.FAIL_IF_EXISTS and Path(path).exists():
        raise ConflictError(f"File already exists: {path}")
