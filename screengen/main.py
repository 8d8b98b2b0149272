"""
screengen — CLI entrypoint.

Usage:
    python -m screengen.main --help
    python -m screengen.main generate vue
    python -m screengen.main generate mock-api --dry-run
    python -m screengen.main config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from screengen import __version__
from screengen.core.observability.logging_config import resolve_level, setup_logging

_FAMILY_CHOICES = ["vb", "vue", "mock-api"]
_MODE_CHOICES = ["fail", "overwrite", "append"]


@click.group()
@click.version_option(version=__version__, prog_name="screengen")
@click.option("--verbose", "-v", is_flag=True, help="Show progress (INFO logging).")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to screengen.yml (default: search upward from cwd).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """screengen — stamp out screen scaffolding from CSV rows."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug, verbose, quiet, os.environ.get("SCREENGEN_LOG_LEVEL")),
        log_dir=os.environ.get("SCREENGEN_LOG_DIR"),
    )


@cli.command()
@click.argument("family", type=click.Choice(_FAMILY_CHOICES, case_sensitive=False))
@click.option(
    "--mode",
    type=click.Choice(_MODE_CHOICES),
    default="fail",
    show_default=True,
    help="What to do when a per-screen file already exists.",
)
@click.option("--dry-run", is_flag=True, help="Render everything but write nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(ctx: click.Context, family: str, mode: str, dry_run: bool, as_json: bool) -> None:
    """Generate the files for every new row of a family's CSV."""
    from screengen.core.config.loader import ConfigError, load_config
    from screengen.core.models.template import WriteMode
    from screengen.core.services.families import TargetFamily
    from screengen.core.use_cases.generate import RowStatus, run_generation

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    report = run_generation(
        config,
        TargetFamily.parse(family),
        mode=WriteMode(mode),
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(1 if report.error else 0)

    if report.error:
        click.secho(f"❌ {report.family}: {report.error}", fg="red")
        sys.exit(1)

    title = f"🧩 {report.family}" + (" (dry run)" if dry_run else "")
    click.secho(title, fg="cyan", bold=True)
    click.echo(f"   CSV: {report.csv_path}")
    click.echo()

    icons = {
        RowStatus.CREATED: ("✓", "green"),
        RowStatus.PLANNED: ("•", "cyan"),
        RowStatus.SKIPPED: ("↷", "yellow"),
        RowStatus.FAILED: ("✗", "red"),
    }
    for row in report.rows:
        icon, color = icons[row.status]
        click.secho(f"   {icon} {row.name}", fg=color, nl=False)
        detail = f"  ({row.error})" if row.error else f"  {len(row.files)} file(s)"
        click.echo(detail)

    if report.bulk_files:
        click.echo()
        click.secho(f"   📚 Bulk files: {len(report.bulk_files)}", fg="white", bold=True)
    if report.routes:
        click.secho(f"   🧭 Routes registered: {len(report.routes)}", fg="white", bold=True)

    click.echo()
    done = report.planned if dry_run else report.created
    click.echo(
        f"   {'Planned' if dry_run else 'Created'}: {done}  "
        f"Skipped: {report.skipped}  Failed: {report.failed}"
    )
    click.echo()


@cli.group()
def config() -> None:
    """Generator configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate screengen.yml and the CSV/template files it references."""
    from screengen.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        families = result.config.configured_families()
        click.echo(f"   Families: {', '.join(families) if families else '-'}")
        click.echo(f"   Templates: {result.config.templates_root()}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    click.echo()
    if not result.valid:
        sys.exit(1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
