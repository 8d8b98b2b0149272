"""
Atomic text writes — temp file in the target directory, then rename.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from screengen.core.errors import StorageError

logger = logging.getLogger(__name__)

NEW_FILE_MODE = 0o644


def atomic_write_text(path: Path, content: str, prefix: str = ".screengen_") -> None:
    """Replace ``path`` with ``content`` without leaving a partial file.

    Raises:
        StorageError: The temp file could not be written or renamed.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix, suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with open(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(content)
            # mkstemp creates 0600; keep the mode the file already had
            if path.exists():
                shutil.copymode(path, tmp)
            else:
                tmp.chmod(NEW_FILE_MODE)
            tmp.replace(path)
            logger.debug("Saved %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error("Failed to save %s: %s", path, e)
        raise StorageError(f"Cannot write {path}: {e}") from e
