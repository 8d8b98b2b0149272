"""
Logging configuration — set up once by the CLI before a run.

Console output goes to stderr; its format gets richer as the level
drops. With a log directory, two files are kept there:

    history.log   every record at INFO and above
    error.log     ERROR and above only

Level precedence:
    --debug  >  --verbose  >  --quiet  >  SCREENGEN_LOG_LEVEL  >  WARNING
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_CONSOLE_FORMATS = {
    logging.DEBUG: ("%(asctime)s %(levelname)-7s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s %(levelname)-7s %(message)s", "%H:%M:%S"),
}
_CONSOLE_DEFAULT = ("%(levelname)s: %(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

HISTORY_LOG = "history.log"
ERROR_LOG = "error.log"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def setup_logging(level: str = "WARNING", log_dir: str | Path | None = None) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Optional directory for history.log and error.log.
    """
    numeric = _parse_level(level)
    root = logging.getLogger()
    root.handlers.clear()

    fmt, datefmt = _CONSOLE_DEFAULT
    for threshold in (logging.DEBUG, logging.INFO):
        if numeric <= threshold:
            fmt, datefmt = _CONSOLE_FORMATS[threshold]
            break

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    root.addHandler(console)

    effective = numeric
    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_formatter = logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT)
        for name, file_level in ((HISTORY_LOG, logging.INFO), (ERROR_LOG, logging.ERROR)):
            handler = logging.FileHandler(directory / name, encoding="utf-8")
            handler.setLevel(file_level)
            handler.setFormatter(file_formatter)
            root.addHandler(handler)
        effective = min(effective, logging.INFO)

    root.setLevel(effective)

    # Template compilation chatter is only useful when debugging
    if numeric > logging.DEBUG:
        logging.getLogger("jinja2").setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant, WARNING if unknown."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
