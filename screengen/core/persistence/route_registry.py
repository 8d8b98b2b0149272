"""
Route registry — JSON object mapping screen names to route strings.

The frontend router reads this file. Updates are a single
read-merge-write per run: existing keys are never dropped, incoming
keys win on collision. There is no lock; two concurrent runs race.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from screengen.adapters.filesystem import ensure_dir
from screengen.core.errors import StorageError
from screengen.core.persistence.atomic import atomic_write_text

logger = logging.getLogger(__name__)


def _dump(routes: dict[str, str]) -> str:
    return json.dumps(routes, indent=2, ensure_ascii=False)


def load_routes(registry_path: Path) -> dict[str, str]:
    """Read the registry, creating an empty ``{}`` file if it is missing.

    Raises:
        StorageError: Unreadable file, invalid JSON or not a JSON object.
    """
    if not registry_path.is_file():
        ensure_dir(registry_path.parent)
        atomic_write_text(registry_path, "{}", prefix=".routes_")
        logger.info("Created empty route registry %s", registry_path)
        return {}

    try:
        data = json.loads(registry_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StorageError(f"Cannot read route registry {registry_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise StorageError(f"Route registry {registry_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise StorageError(
            f"Route registry {registry_path} must hold a JSON object, got {type(data).__name__}"
        )
    return data


def merge_routes(registry_path: Path, new_entries: dict[str, str]) -> dict[str, str]:
    """Merge ``new_entries`` into the registry at ``registry_path``.

    Returns:
        The merged mapping as written.
    """
    existing = load_routes(registry_path)
    if not new_entries:
        logger.info("No new routes for %s", registry_path)
        return existing

    merged = {**existing, **new_entries}
    atomic_write_text(registry_path, _dump(merged), prefix=".routes_")

    added = sum(1 for key in new_entries if key not in existing)
    logger.info(
        "Route registry %s: %d added, %d updated, %d total",
        registry_path, added, len(new_entries) - added, len(merged),
    )
    return merged
