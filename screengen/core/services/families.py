"""
Target families — which files a screen turns into, and where.

A family descriptor bundles everything the orchestrator needs:
the CSV to read, the delimiter pair, a per-row artifact planner,
bulk artifacts rendered once over all rows, and the route registry
(Vue only). The orchestrator itself has no family-specific branches.

Layouts:
    vb        {base}/{dir}/Helpers/{name}Helper.vb
              {base}/{dir}/HelperInterfaces/I{name}Helper.vb
              {base}/{dir}/Controllers/{name}Controller.vb
              {base}/{dir}/Model/{name}Model.vb
    vue       {base}/dto/{dir}/{name}DTO.ts
              {base}/data/{dir}/{name}Data.ts
              {base}/views/{dir}/{name}.ts
    mock_api  {mirage}/fixtures/{name}Fixture.json
              {mirage}/request_placeholders/{name}SampleRequest.json  (hasReqBody)
              + bulk indexes under {mirage} and {test_mock}/screens
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from screengen.core.config.loader import require_family
from screengen.core.models.config import GeneratorConfig, MockApiConfig, VbConfig, VueConfig
from screengen.core.models.screen import ScreenDescriptor
from screengen.core.models.template import WriteMode


class TargetFamily(str, Enum):
    VB = "vb"
    VUE = "vue"
    MOCK_API = "mock_api"

    @classmethod
    def parse(cls, value: str) -> TargetFamily:
        """Accept ``mock-api`` as well as ``mock_api``."""
        return cls(value.strip().lower().replace("-", "_"))


@dataclass(frozen=True)
class Artifact:
    """One file to render: template id, target path, optional fixed mode."""

    template_id: str
    path: Path
    mode: WriteMode | None = None


@dataclass
class FamilyDescriptor:
    """Behavior of one target family for a run."""

    family: TargetFamily
    csv_path: Path
    delimiters: tuple[str, str]
    row_artifacts: Callable[[ScreenDescriptor], list[Artifact]]
    bulk_artifacts: list[Artifact] = field(default_factory=list)
    registry_path: Path | None = None


# ── VB.NET ─────────────────────────────────────────────────────────


def _vb(config: GeneratorConfig, section: VbConfig) -> FamilyDescriptor:
    base = config.resolve(section.base_dir)
    tpl = section.templates

    def plan(screen: ScreenDescriptor) -> list[Artifact]:
        root = base / screen.directory
        name = screen.name
        return [
            Artifact(f"vb/{tpl.helper}", root / "Helpers" / f"{name}Helper.vb"),
            Artifact(f"vb/{tpl.interface}", root / "HelperInterfaces" / f"I{name}Helper.vb"),
            Artifact(f"vb/{tpl.controller}", root / "Controllers" / f"{name}Controller.vb"),
            Artifact(f"vb/{tpl.model}", root / "Model" / f"{name}Model.vb"),
        ]

    return FamilyDescriptor(
        family=TargetFamily.VB,
        csv_path=config.resolve(section.csv_file),
        delimiters=section.delimiters,
        row_artifacts=plan,
    )


# ── Vue ────────────────────────────────────────────────────────────


def view_template_id(section: VueConfig, controller: str) -> str:
    """``none`` uses the configured view; anything else picks ``View{controller}Template``."""
    if not controller or controller == "none":
        return f"vue/{section.templates.view}"
    return f"vue/View{controller}Template"


def _vue(config: GeneratorConfig, section: VueConfig) -> FamilyDescriptor:
    base = config.resolve(section.base_dir)
    tpl = section.templates

    def plan(screen: ScreenDescriptor) -> list[Artifact]:
        name, directory = screen.name, screen.directory
        return [
            Artifact(f"vue/{tpl.dto}", base / "dto" / directory / f"{name}DTO.ts"),
            Artifact(f"vue/{tpl.data}", base / "data" / directory / f"{name}Data.ts"),
            Artifact(view_template_id(section, screen.controller), base / "views" / directory / f"{name}.ts"),
        ]

    return FamilyDescriptor(
        family=TargetFamily.VUE,
        csv_path=config.resolve(section.csv_file),
        delimiters=section.delimiters,
        row_artifacts=plan,
        registry_path=config.resolve(section.registry_file),
    )


# ── Mirage API mocks ───────────────────────────────────────────────


def _mock_api(config: GeneratorConfig, section: MockApiConfig) -> FamilyDescriptor:
    mirage = config.resolve(section.mirage_dir)
    test_mock = config.resolve(section.test_mock_dir)
    tpl = section.templates

    def plan(screen: ScreenDescriptor) -> list[Artifact]:
        artifacts = [
            Artifact(f"psx/{tpl.fixture}", mirage / "fixtures" / f"{screen.name}Fixture.json"),
        ]
        if screen.has_req_body:
            artifacts.append(
                Artifact(
                    f"psx/{tpl.request}",
                    mirage / "request_placeholders" / f"{screen.name}SampleRequest.json",
                )
            )
        return artifacts

    # Aggregates are rebuilt from every row on each run.
    bulk = [
        Artifact(f"psx/{tpl.all_requests}", mirage / "request_placeholders" / "index.js", WriteMode.OVERWRITE),
        Artifact(f"psx/{tpl.all_models}", mirage / "models" / "index.js", WriteMode.OVERWRITE),
        Artifact(f"psx/{tpl.master_routes}", mirage / "routes" / "index.js", WriteMode.OVERWRITE),
        Artifact(f"psx/{tpl.all_fixtures}", mirage / "fixtures" / "index.js", WriteMode.OVERWRITE),
        Artifact(f"psx/{tpl.mock_test_card}", test_mock / "screens" / "TestScreen.js", WriteMode.OVERWRITE),
    ]

    return FamilyDescriptor(
        family=TargetFamily.MOCK_API,
        csv_path=config.resolve(section.csv_file),
        delimiters=section.delimiters,
        row_artifacts=plan,
        bulk_artifacts=bulk,
    )


_BUILDERS = {
    TargetFamily.VB: _vb,
    TargetFamily.VUE: _vue,
    TargetFamily.MOCK_API: _mock_api,
}


def build_family(config: GeneratorConfig, family: TargetFamily) -> FamilyDescriptor:
    """Build the descriptor for ``family``.

    Raises:
        ConfigError: The family's config section is missing.
    """
    section = require_family(config, family.value)
    return _BUILDERS[family](config, section)
