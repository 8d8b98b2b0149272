"""
Config check use case — validate screengen.yml and the files it points at.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from screengen.core.config.loader import ConfigError, find_config_file, load_config
from screengen.core.models.config import GeneratorConfig
from screengen.core.services.families import TargetFamily, build_family
from screengen.core.services.renderer import TemplateRenderer


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: GeneratorConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "families": self.config.configured_families() if self.config else [],
            "templates_dir": str(self.config.templates_root()) if self.config else None,
        }


def _static_template_ids(config: GeneratorConfig, family: TargetFamily) -> list[str]:
    """Template ids a family always needs (the per-controller Vue views vary by row)."""
    if family is TargetFamily.VB:
        tpl = config.vb.templates
        return [f"vb/{t}" for t in (tpl.helper, tpl.interface, tpl.controller, tpl.model)]
    if family is TargetFamily.VUE:
        tpl = config.vue.templates
        return [f"vue/{t}" for t in (tpl.dto, tpl.data, tpl.view)]
    tpl = config.mock_api.templates
    return [f"psx/{t}" for t in tpl.model_dump().values()]


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate configuration and report issues.

    Args:
        config_path: Optional explicit path to screengen.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.errors.append("No screengen.yml found.")
        return result
    result.config_path = config_path

    try:
        config = load_config(config_path)
        result.config = config
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    families = config.configured_families()
    if not families:
        result.warnings.append("No target families configured (vb, vue, mock_api).")

    templates_root = config.templates_root()
    if not templates_root.is_dir():
        result.errors.append(f"Templates directory not found: {templates_root}")
    renderer = TemplateRenderer(templates_root)

    for name in families:
        family = TargetFamily(name)
        descriptor = build_family(config, family)

        if not descriptor.csv_path.is_file():
            result.errors.append(f"{name}: CSV file not found: {descriptor.csv_path}")

        for template_id in _static_template_ids(config, family):
            if not renderer.exists(template_id):
                result.errors.append(f"{name}: template not found: {template_id}")

        if descriptor.registry_path is not None and not descriptor.registry_path.is_file():
            result.warnings.append(
                f"{name}: route registry {descriptor.registry_path} does not exist yet; it will be created."
            )

    result.valid = len(result.errors) == 0
    return result
