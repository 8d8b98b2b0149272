"""
Generator configuration model — loaded from screengen.yml.

One section per target family. A section only has to be present when
that family is generated; ``require_family()`` in the loader enforces it
before a run touches the filesystem.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


ALT_DELIMITERS = ("<%", "%>")
DEFAULT_DELIMITERS = ("{{", "}}")


class _FamilyConfig(BaseModel):
    """Options shared by every family section."""

    csv_file: str
    delimiters: tuple[str, str] = DEFAULT_DELIMITERS

    @field_validator("delimiters")
    @classmethod
    def _check_delimiters(cls, value: tuple[str, str]) -> tuple[str, str]:
        start, end = value
        if not start or not end or start == end:
            raise ValueError(f"Invalid delimiter pair: {value!r}")
        return value


class VbTemplates(BaseModel):
    helper: str = "BaseHelper"
    interface: str = "BaseInterface"
    controller: str = "BaseController"
    model: str = "BaseModel"


class VbConfig(_FamilyConfig):
    """VB.NET backend: Helper, Interface, Controller, Model per screen."""

    base_dir: str
    delimiters: tuple[str, str] = ALT_DELIMITERS
    templates: VbTemplates = Field(default_factory=VbTemplates)


class VueTemplates(BaseModel):
    dto: str = "BaseDto"
    data: str = "BaseData"
    view: str = "BaseView"


class VueConfig(_FamilyConfig):
    """Vue frontend: DTO, Data and View per screen, plus the route registry."""

    base_dir: str
    router_config_dir: str
    router_config_name: str = "routes"
    delimiters: tuple[str, str] = ALT_DELIMITERS
    templates: VueTemplates = Field(default_factory=VueTemplates)

    @property
    def registry_file(self) -> str:
        return f"{self.router_config_dir}/{self.router_config_name}.json"


class MockApiTemplates(BaseModel):
    fixture: str = "BaseSingleFixture"
    request: str = "BaseSingleRequestPlaceholders"
    all_fixtures: str = "BaseAllFixtures"
    all_models: str = "BaseAllModels"
    all_requests: str = "BaseAllRequestPlaceholders"
    master_routes: str = "BaseMasterRoutes"
    mock_test_card: str = "BaseMockTestCard"


class MockApiConfig(_FamilyConfig):
    """Mirage-style API mocks: fixture and request sample per row, bulk indexes."""

    mirage_dir: str
    test_mock_dir: str
    templates: MockApiTemplates = Field(default_factory=MockApiTemplates)


class GeneratorConfig(BaseModel):
    """Root configuration, constructed once per process and passed down."""

    templates_dir: str | None = None
    vb: VbConfig | None = None
    vue: VueConfig | None = None
    mock_api: MockApiConfig | None = None

    # Directory holding screengen.yml; relative paths resolve against it.
    root: Path = Field(default_factory=Path.cwd, exclude=True)

    def resolve(self, path: str) -> Path:
        """Resolve a configured path against the config root."""
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            return candidate
        return (self.root / candidate).resolve()

    def templates_root(self) -> Path:
        """Directory holding template resources (packaged defaults if unset)."""
        if self.templates_dir:
            return self.resolve(self.templates_dir)
        return Path(__file__).resolve().parent.parent.parent / "templates"

    def configured_families(self) -> list[str]:
        return [name for name in ("vb", "vue", "mock_api") if getattr(self, name) is not None]
