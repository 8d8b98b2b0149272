"""
Generate use case — the orchestrator for one family run.

Flow:
    load CSV → normalize rows → render + write per row (+ bulk) →
    merge route registry → mark rows created → summary

Stage errors (config, CSV load, registry, CSV write-back) end the run
with ``report.error`` set. Row errors only fail that row.

A row's files are all rendered in memory first and written only when
every template rendered, so a render failure never leaves a partial
artifact set. A write failure mid-row can still leave earlier files of
that row on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from screengen.adapters.filesystem import check_writable, ensure_dir, write_file
from screengen.core.config.loader import ConfigError
from screengen.core.errors import ConflictError, GeneratorError
from screengen.core.models.config import GeneratorConfig
from screengen.core.models.screen import ScreenDescriptor
from screengen.core.models.template import GeneratedFile, WriteMode
from screengen.core.persistence.csv_markers import mark_created
from screengen.core.persistence.route_registry import merge_routes
from screengen.core.services.csv_loader import load_rows
from screengen.core.services.families import (
    Artifact,
    FamilyDescriptor,
    TargetFamily,
    build_family,
)
from screengen.core.services.normalizer import normalize
from screengen.core.services.renderer import TemplateRenderer

logger = logging.getLogger(__name__)


class RunStage(str, Enum):
    LOADING = "loading"
    NORMALIZING = "normalizing"
    GENERATING = "generating"
    REGISTERING = "registering"
    DONE = "done"
    FAILED = "failed"


class RowStatus(str, Enum):
    CREATED = "created"
    PLANNED = "planned"   # dry run: rendered, not written
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RowResult:
    """Outcome of one CSV row."""

    index: int
    name: str
    status: RowStatus
    files: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "name": self.name,
            "status": self.status.value,
            "files": self.files,
            "error": self.error,
        }


@dataclass
class GenerationReport:
    """Result of a generator run."""

    family: str = ""
    csv_path: Path | None = None
    stage: RunStage = RunStage.LOADING
    dry_run: bool = False
    rows: list[RowResult] = field(default_factory=list)
    bulk_files: list[str] = field(default_factory=list)
    routes: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    def _count(self, status: RowStatus) -> int:
        return sum(1 for r in self.rows if r.status is status)

    @property
    def created(self) -> int:
        return self._count(RowStatus.CREATED)

    @property
    def planned(self) -> int:
        return self._count(RowStatus.PLANNED)

    @property
    def skipped(self) -> int:
        return self._count(RowStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(RowStatus.FAILED)

    @property
    def status(self) -> str:
        if self.error:
            return "failed"
        if self.failed == 0:
            return "ok"
        return "partial"

    def row(self, name: str) -> RowResult | None:
        for r in self.rows:
            if r.name == name:
                return r
        return None

    def to_dict(self) -> dict:
        return {
            "family": self.family,
            "csv": str(self.csv_path) if self.csv_path else None,
            "stage": self.stage.value,
            "status": self.status,
            "dry_run": self.dry_run,
            "error": self.error,
            "created": self.created,
            "planned": self.planned,
            "skipped": self.skipped,
            "failed": self.failed,
            "rows": [r.to_dict() for r in self.rows],
            "bulk_files": self.bulk_files,
            "routes": self.routes,
        }


def _fail(report: GenerationReport, message: str) -> GenerationReport:
    logger.error("%s run failed during %s: %s", report.family, report.stage.value, message)
    report.error = message
    report.stage = RunStage.FAILED
    return report


def _render_all(
    renderer: TemplateRenderer,
    artifacts: list[Artifact],
    context: dict,
    delimiters: tuple[str, str],
    default_mode: WriteMode,
) -> list[GeneratedFile]:
    return [
        GeneratedFile(
            path=str(a.path),
            content=renderer.render(a.template_id, context, delimiters),
            mode=a.mode or default_mode,
            template_id=a.template_id,
        )
        for a in artifacts
    ]


def _write_all(files: list[GeneratedFile]) -> None:
    for f in files:
        path = Path(f.path)
        ensure_dir(path.parent)
        write_file(path, f.content, f.mode)


def _generate_row(
    screen: ScreenDescriptor,
    descriptor: FamilyDescriptor,
    renderer: TemplateRenderer,
    mode: WriteMode,
    dry_run: bool,
) -> RowResult:
    result = RowResult(index=screen.index, name=screen.name, status=RowStatus.FAILED)
    logger.info("Generating %s (%s)", screen.name, screen.directory)

    try:
        files = _render_all(
            renderer, descriptor.row_artifacts(screen), screen.to_context(), descriptor.delimiters, mode,
        )
        result.files = [f.path for f in files]
        for f in files:
            check_writable(Path(f.path), f.mode)
    except ConflictError as e:
        logger.warning("Skipping %s: %s", screen.name, e)
        result.status = RowStatus.SKIPPED
        result.error = str(e)
        return result
    except GeneratorError as e:
        logger.error("Failed to render %s: %s", screen.name, e)
        result.error = str(e)
        return result

    if dry_run:
        for path in result.files:
            logger.info("Would write %s", path)
        result.status = RowStatus.PLANNED
        return result

    try:
        _write_all(files)
    except ConflictError as e:
        logger.warning("Skipping %s: %s", screen.name, e)
        result.status = RowStatus.SKIPPED
        result.error = str(e)
        return result
    except GeneratorError as e:
        logger.error("Failed to write %s: %s", screen.name, e)
        result.error = str(e)
        return result

    result.status = RowStatus.CREATED
    logger.info("Created %s: %d file(s)", screen.name, len(files))
    return result


def run_generation(
    config: GeneratorConfig,
    family: TargetFamily,
    mode: WriteMode = WriteMode.FAIL_IF_EXISTS,
    dry_run: bool = False,
    renderer: TemplateRenderer | None = None,
) -> GenerationReport:
    """Run one target family's generator over its CSV.

    Args:
        config: Loaded generator configuration.
        family: Which family to generate.
        mode: Write mode for per-row files (bulk files always overwrite).
        dry_run: Render and report, but write nothing.
        renderer: Optional pre-built renderer (tests).

    Returns:
        GenerationReport; ``error`` is set if a stage failed.
    """
    report = GenerationReport(family=family.value, dry_run=dry_run)

    try:
        descriptor = build_family(config, family)
    except ConfigError as e:
        return _fail(report, str(e))

    report.csv_path = descriptor.csv_path
    if renderer is None:
        renderer = TemplateRenderer(config.templates_root())

    # ── Loading ──────────────────────────────────────────────────
    try:
        raw_rows = load_rows(descriptor.csv_path)
    except GeneratorError as e:
        return _fail(report, str(e))

    # ── Normalizing ──────────────────────────────────────────────
    report.stage = RunStage.NORMALIZING
    screens: list[ScreenDescriptor] = []
    for index, raw in enumerate(raw_rows):
        try:
            screens.append(normalize(raw, index))
        except GeneratorError as e:
            name = (raw.get("name") or raw.get("screen") or f"row {index}").strip() or f"row {index}"
            logger.error("Skipping %s: %s", name, e)
            report.rows.append(RowResult(index=index, name=name, status=RowStatus.FAILED, error=str(e)))

    # ── Generating ───────────────────────────────────────────────
    report.stage = RunStage.GENERATING
    pending: list[ScreenDescriptor] = []
    for screen in screens:
        if screen.is_created:
            logger.warning("Skipping %s: already created", screen.name)
            report.rows.append(
                RowResult(index=screen.index, name=screen.name, status=RowStatus.SKIPPED, error="already created")
            )
        else:
            pending.append(screen)

    bulk_files: list[GeneratedFile] = []
    bulk_error: str | None = None
    if pending and descriptor.bulk_artifacts:
        bulk_context = {"bulk": [s.to_context() for s in screens]}
        try:
            bulk_files = _render_all(
                renderer, descriptor.bulk_artifacts, bulk_context, descriptor.delimiters, WriteMode.OVERWRITE,
            )
        except GeneratorError as e:
            bulk_error = f"bulk templates: {e}"
            logger.error("Cannot render bulk templates: %s", e)

    row_results: list[RowResult] = []
    for screen in pending:
        if bulk_error:
            row_results.append(
                RowResult(index=screen.index, name=screen.name, status=RowStatus.FAILED, error=bulk_error)
            )
            continue
        row_results.append(_generate_row(screen, descriptor, renderer, mode, dry_run))

    generated = [r for r in row_results if r.status in (RowStatus.CREATED, RowStatus.PLANNED)]
    if bulk_files and generated:
        report.bulk_files = [f.path for f in bulk_files]
        if not dry_run:
            try:
                _write_all(bulk_files)
            except GeneratorError as e:
                logger.error("Cannot write bulk files: %s", e)
                for r in generated:
                    r.status = RowStatus.FAILED
                    r.error = f"bulk files: {e}"

    report.rows.extend(row_results)
    report.rows.sort(key=lambda r: r.index)

    created = [r for r in row_results if r.status is RowStatus.CREATED]

    # ── Registering ──────────────────────────────────────────────
    report.stage = RunStage.REGISTERING
    if descriptor.registry_path is not None:
        by_index = {s.index: s for s in screens}
        report.routes = {
            by_index[r.index].name: by_index[r.index].route
            for r in (created if not dry_run else generated)
            if by_index[r.index].route
        }
        if not dry_run:
            try:
                merge_routes(descriptor.registry_path, report.routes)
            except GeneratorError as e:
                return _fail(report, str(e))

    if created and not dry_run:
        try:
            mark_created(descriptor.csv_path, [r.index for r in created])
        except GeneratorError as e:
            return _fail(report, str(e))

    report.stage = RunStage.DONE
    logger.info(
        "%s run complete: %d created, %d skipped, %d failed",
        family.value, report.created, report.skipped, report.failed,
    )
    return report
