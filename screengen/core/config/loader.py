"""
Configuration loader — reads screengen.yml into a GeneratorConfig.

This is the only place configuration is read. The CLI loads it once
and hands the validated model to the use cases.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from screengen.core.errors import GeneratorError
from screengen.core.models.config import GeneratorConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "screengen.yml"


class ConfigError(GeneratorError):
    """Raised when generator configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for screengen.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to screengen.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None) -> GeneratorConfig:
    """Load and validate generator configuration.

    Args:
        path: Explicit path to screengen.yml. If None, searches upward.

    Returns:
        Validated GeneratorConfig whose ``root`` is the config directory.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Specify one with --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading generator config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    data["root"] = path.parent.resolve()

    try:
        config = GeneratorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(_describe_validation_error(e)) from e

    logger.info("Loaded config from %s (families: %s)", path, ", ".join(config.configured_families()) or "none")
    return config


def require_family(config: GeneratorConfig, family: str) -> BaseModel:
    """Return the config section for ``family`` or fail fast.

    Raises:
        ConfigError: naming the missing option.
    """
    section = getattr(config, family, None)
    if section is None:
        raise ConfigError(f"Missing required option: {family}")
    return section


def _describe_validation_error(error: ValidationError) -> str:
    """Turn a pydantic error into a message naming the offending options."""
    missing = []
    invalid = []
    for item in error.errors():
        option = ".".join(str(part) for part in item["loc"])
        if item["type"] in ("missing", "none_required") or item.get("input", "") is None:
            missing.append(option)
        else:
            invalid.append(f"{option} ({item['msg']})")

    if missing:
        return "Missing required option: " + ", ".join(missing)
    return "Invalid generator configuration: " + "; ".join(invalid)
