"""
Shared test fixtures and configuration.
"""

import csv
import textwrap
from pathlib import Path

import pytest

from screengen.core.config.loader import load_config
from screengen.core.models.config import GeneratorConfig


def _write_csv(path: Path, header: list[str], rows: list[list[str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh, lineterminator="\n")
        writer.writerow(header)
        writer.writerows(rows)
    return path


@pytest.fixture
def write_csv():
    """Return a helper that writes a small CSV with proper quoting."""
    return _write_csv


@pytest.fixture
def packaged_templates() -> Path:
    """Return the templates shipped with the package."""
    return Path(__file__).parent.parent / "screengen" / "templates"


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A screengen.yml wiring all three families into tmp_path."""
    content = textwrap.dedent("""\
        vb:
          csv_file: csv/vb.csv
          base_dir: out/vb
        vue:
          csv_file: csv/vue.csv
          base_dir: out/vue/src
          router_config_dir: out/vue/src/router
          router_config_name: routes
        mock_api:
          csv_file: csv/mock.csv
          mirage_dir: out/mirage
          test_mock_dir: out/app
    """)
    path = tmp_path / "screengen.yml"
    path.write_text(content)
    return path


@pytest.fixture
def config(config_file: Path) -> GeneratorConfig:
    return load_config(config_file)
