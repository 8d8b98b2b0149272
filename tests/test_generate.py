"""
Tests for the generate use case — the per-family orchestrator.

Runs use the packaged templates and write into tmp_path.
"""

import json
import textwrap
from pathlib import Path

import pytest

from screengen.core.config.loader import load_config
from screengen.core.models.template import WriteMode
from screengen.core.services.csv_loader import load_rows
from screengen.core.services.families import TargetFamily
from screengen.core.use_cases.generate import RowStatus, RunStage, run_generation

MOCK_HEADER = ["name", "directory", "isGet", "hasReqBody", "route", "response_sample", "request_sample", "created"]
VUE_HEADER = ["screen", "directory", "route", "controller", "created"]
VB_HEADER = ["screen", "directory", "args", "created"]


@pytest.fixture
def mock_csv(config, write_csv):
    def _make(rows):
        return write_csv(config.root / "csv" / "mock.csv", MOCK_HEADER, rows)
    return _make


@pytest.fixture
def vue_csv(config, write_csv):
    def _make(rows):
        return write_csv(config.root / "csv" / "vue.csv", VUE_HEADER, rows)
    return _make


def _created_column(path: Path) -> list[str]:
    return [row["created"] for row in load_rows(path)]


class TestMockApi:
    def test_fixture_written_and_row_marked(self, config, write_csv):
        csv_path = write_csv(
            config.root / "csv" / "mock.csv",
            ["name", "directory", "isGet", "response_sample", "created"],
            [["Foo", "widgets", "y", '{"id":1}', "n"]],
        )
        report = run_generation(config, TargetFamily.MOCK_API)

        assert report.error is None
        assert report.stage is RunStage.DONE
        assert report.created == 1
        fixture = config.root / "out" / "mirage" / "fixtures" / "FooFixture.json"
        assert fixture.read_text() == '{ "data": {"id":1} }\n'
        assert json.loads(fixture.read_text()) == {"data": {"id": 1}}
        assert _created_column(csv_path) == ["y"]

    def test_bulk_files(self, config, mock_csv):
        mock_csv([
            ["Foo", "w", "y", "n", "/api/foo", '{"id": 1}', "", "n"],
            ["Bar", "w", "n", "y", "/api/bar", "", '{"q": 1}', "n"],
        ])
        report = run_generation(config, TargetFamily.MOCK_API)

        mirage = config.root / "out" / "mirage"
        assert len(report.bulk_files) == 5
        models = (mirage / "models" / "index.js").read_text()
        assert "Foo: Model," in models and "Bar: Model," in models
        routes = (mirage / "routes" / "index.js").read_text()
        assert "this.resource('/api/foo');" in routes
        assert "this.post('/api/bar'" in routes
        requests = (mirage / "request_placeholders" / "index.js").read_text()
        assert "BarSampleRequest" in requests
        assert "FooSampleRequest" not in requests
        assert (config.root / "out" / "app" / "screens" / "TestScreen.js").is_file()

    def test_request_placeholder(self, config, mock_csv):
        mock_csv([["Bar", "w", "n", "y", "/api/bar", "", '{"q": 1}', "n"]])
        run_generation(config, TargetFamily.MOCK_API)
        sample = config.root / "out" / "mirage" / "request_placeholders" / "BarSampleRequest.json"
        assert sample.read_text() == '{\n  "q": 1\n}\n'

    def test_rerun_is_noop(self, config, mock_csv):
        csv_path = mock_csv([["Foo", "w", "y", "n", "/foo", '{"id": 1}', "", "n"]])
        run_generation(config, TargetFamily.MOCK_API)
        fixture = config.root / "out" / "mirage" / "fixtures" / "FooFixture.json"
        fixture.write_text("hand edited")
        models = config.root / "out" / "mirage" / "models" / "index.js"
        models_before = models.read_text()

        report = run_generation(config, TargetFamily.MOCK_API)

        assert report.error is None
        assert report.created == 0
        assert report.row("Foo").status is RowStatus.SKIPPED
        assert report.row("Foo").error == "already created"
        assert report.bulk_files == []
        assert fixture.read_text() == "hand edited"
        assert models.read_text() == models_before
        assert _created_column(csv_path) == ["y"]

    def test_malformed_json_fails_only_that_row(self, config, mock_csv):
        csv_path = mock_csv([
            ["Foo", "w", "y", "n", "/foo", "{not json", "", "n"],
            ["Bar", "w", "y", "n", "/bar", '{"ok": true}', "", "n"],
        ])
        report = run_generation(config, TargetFamily.MOCK_API)

        assert report.error is None
        assert report.status == "partial"
        assert report.row("Foo").status is RowStatus.FAILED
        assert "response_sample" in report.row("Foo").error
        assert report.row("Bar").status is RowStatus.CREATED
        fixtures = config.root / "out" / "mirage" / "fixtures"
        assert not (fixtures / "FooFixture.json").exists()
        assert (fixtures / "BarFixture.json").read_text() == '{ "data": {"ok":true} }\n'
        assert "FooFixture" not in (fixtures / "index.js").read_text()
        assert _created_column(csv_path) == ["n", "y"]

    def test_blank_is_get_routes_as_post(self, config, mock_csv):
        mock_csv([["Foo", "w", "", "n", "/foo", "{}", "", "n"]])
        run_generation(config, TargetFamily.MOCK_API)
        routes = (config.root / "out" / "mirage" / "routes" / "index.js").read_text()
        assert "this.post('/foo'" in routes
        assert "this.resource('/foo')" not in routes
        card = (config.root / "out" / "app" / "screens" / "TestScreen.js").read_text()
        assert "fetch(" not in card

    @pytest.mark.parametrize("sample, expected", [
        ("", "null"),
        ("null", "null"),
        ('"plain text"', '"plain text"'),
        ("[1, 2]", "[1,2]"),
    ])
    def test_fixture_is_valid_json(self, config, mock_csv, sample, expected):
        mock_csv([["Foo", "w", "y", "n", "/foo", sample, "", "n"]])
        run_generation(config, TargetFamily.MOCK_API)
        fixture = (config.root / "out" / "mirage" / "fixtures" / "FooFixture.json").read_text()
        assert fixture == f'{{ "data": {expected} }}\n'
        json.loads(fixture)

    def test_rows_reported_in_csv_order(self, config, mock_csv):
        mock_csv([
            ["A", "w", "y", "n", "", "{}", "", "y"],
            ["B", "w", "y", "n", "", "{bad", "", "n"],
            ["C", "w", "y", "n", "", "{}", "", "n"],
        ])
        report = run_generation(config, TargetFamily.MOCK_API)
        assert [r.name for r in report.rows] == ["A", "B", "C"]
        assert [r.status for r in report.rows] == [RowStatus.SKIPPED, RowStatus.FAILED, RowStatus.CREATED]


class TestWriteModes:
    def test_existing_file_skips_row(self, config, mock_csv):
        csv_path = mock_csv([["Foo", "w", "y", "n", "/foo", '{"id": 1}', "", "n"]])
        fixture = config.root / "out" / "mirage" / "fixtures" / "FooFixture.json"
        fixture.parent.mkdir(parents=True)
        fixture.write_text("keep me")

        report = run_generation(config, TargetFamily.MOCK_API, mode=WriteMode.FAIL_IF_EXISTS)

        assert report.error is None
        assert report.row("Foo").status is RowStatus.SKIPPED
        assert "already exists" in report.row("Foo").error
        assert fixture.read_text() == "keep me"
        assert report.bulk_files == []
        assert _created_column(csv_path) == ["n"]

    def test_overwrite_replaces(self, config, mock_csv):
        csv_path = mock_csv([["Foo", "w", "y", "n", "/foo", '{"id": 1}', "", "n"]])
        fixture = config.root / "out" / "mirage" / "fixtures" / "FooFixture.json"
        fixture.parent.mkdir(parents=True)
        fixture.write_text("stale")

        report = run_generation(config, TargetFamily.MOCK_API, mode=WriteMode.OVERWRITE)

        assert report.row("Foo").status is RowStatus.CREATED
        assert fixture.read_text() == '{ "data": {"id":1} }\n'
        assert _created_column(csv_path) == ["y"]

    def test_append_extends(self, config, mock_csv):
        mock_csv([["Foo", "w", "y", "n", "/foo", "1", "", "n"]])
        fixture = config.root / "out" / "mirage" / "fixtures" / "FooFixture.json"
        fixture.parent.mkdir(parents=True)
        fixture.write_text("old\n")

        run_generation(config, TargetFamily.MOCK_API, mode=WriteMode.APPEND)

        assert fixture.read_text() == 'old\n{ "data": 1 }\n'


class TestVue:
    def test_files_and_registry_merge(self, config, vue_csv):
        registry = config.root / "out" / "vue" / "src" / "router" / "routes.json"
        registry.parent.mkdir(parents=True)
        registry.write_text(json.dumps({"Old": "/old", "A": "/stale"}))
        csv_path = vue_csv([
            ["A", "claims", "/a", "", "n"],
            ["B", "claims", "/b", "ScreenController", "n"],
        ])

        report = run_generation(config, TargetFamily.VUE)

        assert report.error is None
        assert json.loads(registry.read_text()) == {"Old": "/old", "A": "/a", "B": "/b"}
        assert report.routes == {"A": "/a", "B": "/b"}

        base = config.root / "out" / "vue" / "src"
        assert (base / "dto" / "claims" / "ADTO.ts").is_file()
        assert 'route = "/a"' in (base / "data" / "claims" / "AData.ts").read_text()
        default_view = (base / "views" / "claims" / "A.ts").read_text()
        assert "export default class A extends Vue" in default_view
        assert "{{ dto.screenTitle }}" in default_view
        controller_view = (base / "views" / "claims" / "B.ts").read_text()
        assert 'useScreenController("B"' in controller_view
        assert "{{ controller.error.value }}" in controller_view
        assert _created_column(csv_path) == ["y", "y"]

    def test_registry_created_when_missing(self, config, vue_csv):
        vue_csv([["A", "claims", "/a", "", "n"]])
        run_generation(config, TargetFamily.VUE)
        registry = config.root / "out" / "vue" / "src" / "router" / "routes.json"
        assert json.loads(registry.read_text()) == {"A": "/a"}

    def test_rows_without_route_not_registered(self, config, vue_csv):
        vue_csv([["A", "claims", "", "", "n"], ["B", "claims", "/b", "", "n"]])
        report = run_generation(config, TargetFamily.VUE)
        assert report.routes == {"B": "/b"}

    def test_skipped_rows_not_registered(self, config, vue_csv):
        vue_csv([["A", "claims", "/a", "", "y"]])
        report = run_generation(config, TargetFamily.VUE)
        registry = config.root / "out" / "vue" / "src" / "router" / "routes.json"
        assert report.routes == {}
        assert json.loads(registry.read_text()) == {}

    def test_broken_registry_fails_run_without_marking(self, config, vue_csv):
        registry = config.root / "out" / "vue" / "src" / "router" / "routes.json"
        registry.parent.mkdir(parents=True)
        registry.write_text("{broken")
        csv_path = vue_csv([["A", "claims", "/a", "", "n"]])

        report = run_generation(config, TargetFamily.VUE)

        assert report.stage is RunStage.FAILED
        assert "not valid JSON" in report.error
        assert registry.read_text() == "{broken"
        assert _created_column(csv_path) == ["n"]


class TestVb:
    def test_four_files(self, config, write_csv):
        write_csv(config.root / "csv" / "vb.csv", VB_HEADER, [["SSR11234", "health_care/med", "id,userId", "n"]])

        report = run_generation(config, TargetFamily.VB)

        assert report.created == 1
        base = config.root / "out" / "vb" / "health_care" / "med"
        assert (base / "Helpers" / "SSR11234Helper.vb").is_file()
        assert "Public Interface ISSR11234Helper" in (base / "HelperInterfaces" / "ISSR11234Helper.vb").read_text()
        assert "Public Class SSR11234Controller" in (base / "Controllers" / "SSR11234Controller.vb").read_text()
        model = (base / "Model" / "SSR11234Model.vb").read_text()
        assert "Public Property id As String" in model
        assert "Public Property userId As String" in model
        assert report.routes == {}

    def test_directory_outside_base_rejected(self, config, write_csv, tmp_path: Path):
        outside = tmp_path / "outside"
        csv_path = write_csv(
            config.root / "csv" / "vb.csv",
            ["screen", "directory", "created"],
            [["Foo", str(outside), "n"], ["Bar", "../escape", "n"], ["Ok", "d", "n"]],
        )

        report = run_generation(config, TargetFamily.VB)

        assert report.row("Foo").status is RowStatus.FAILED
        assert "must be relative" in report.row("Foo").error
        assert report.row("Bar").status is RowStatus.FAILED
        assert report.row("Ok").status is RowStatus.CREATED
        assert not outside.exists()
        assert not (config.root / "out" / "escape").exists()
        assert _created_column(csv_path) == ["n", "n", "y"]

    def test_created_column_added(self, config, write_csv):
        csv_path = write_csv(config.root / "csv" / "vb.csv", ["screen", "directory"], [["A", "d"]])
        run_generation(config, TargetFamily.VB)
        rows = load_rows(csv_path)
        assert rows == [{"screen": "A", "directory": "d", "created": "y"}]


class TestDryRun:
    def test_writes_nothing(self, config, vue_csv):
        csv_path = vue_csv([["A", "claims", "/a", "", "n"]])
        before = csv_path.read_text()

        report = run_generation(config, TargetFamily.VUE, dry_run=True)

        assert report.error is None
        assert report.dry_run is True
        assert report.planned == 1
        assert report.created == 0
        assert report.routes == {"A": "/a"}
        assert len(report.row("A").files) == 3
        assert not (config.root / "out").exists()
        assert csv_path.read_text() == before

    def test_mock_bulk_planned(self, config, mock_csv):
        mock_csv([["Foo", "w", "y", "n", "/foo", "{}", "", "n"]])
        report = run_generation(config, TargetFamily.MOCK_API, dry_run=True)
        assert len(report.bulk_files) == 5
        assert not (config.root / "out").exists()


class TestStageFailures:
    def test_missing_family_section(self, tmp_path: Path):
        path = tmp_path / "screengen.yml"
        path.write_text("vb:\n  csv_file: vb.csv\n  base_dir: out\n")
        config = load_config(path)

        report = run_generation(config, TargetFamily.MOCK_API)

        assert report.stage is RunStage.FAILED
        assert report.error == "Missing required option: mock_api"
        assert report.rows == []

    def test_missing_csv(self, config):
        report = run_generation(config, TargetFamily.VB)
        assert report.status == "failed"
        assert "not found" in report.error
        assert not (config.root / "out").exists()

    def test_empty_csv_ok(self, config, write_csv):
        write_csv(config.root / "csv" / "vb.csv", VB_HEADER, [])
        report = run_generation(config, TargetFamily.VB)
        assert report.error is None
        assert report.rows == []


class TestTemplateFailures:
    @pytest.fixture
    def custom(self, tmp_path: Path, packaged_templates: Path, write_csv):
        """Config with its own templates dir, seeded with a chosen subset."""
        templates = tmp_path / "tpl"
        config_path = tmp_path / "screengen.yml"
        config_path.write_text(textwrap.dedent("""\
            templates_dir: tpl
            vb:
              csv_file: vb.csv
              base_dir: out
            mock_api:
              csv_file: mock.csv
              mirage_dir: out/mirage
              test_mock_dir: out/app
        """))

        def _make(*template_ids):
            for template_id in template_ids:
                target = templates / f"{template_id}.j2"
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text((packaged_templates / f"{template_id}.j2").read_text())
            return load_config(config_path)

        return _make

    def test_missing_row_template_writes_nothing(self, custom, tmp_path: Path, write_csv):
        config = custom("vb/BaseHelper", "vb/BaseInterface", "vb/BaseController")
        write_csv(tmp_path / "vb.csv", ["screen", "directory"], [["A", "d"]])

        report = run_generation(config, TargetFamily.VB)

        row = report.row("A")
        assert row.status is RowStatus.FAILED
        assert "Template not found: vb/BaseModel" in row.error
        assert not (tmp_path / "out").exists()
        assert "created" not in load_rows(tmp_path / "vb.csv")[0]

    def test_missing_bulk_template_fails_all_rows(self, custom, tmp_path: Path, write_csv):
        config = custom("psx/BaseSingleFixture", "psx/BaseSingleRequestPlaceholders")
        write_csv(tmp_path / "mock.csv", ["name", "directory"], [["A", "d"], ["B", "d"]])

        report = run_generation(config, TargetFamily.MOCK_API)

        assert report.failed == 2
        assert all("bulk templates" in r.error for r in report.rows)
        assert not (tmp_path / "out").exists()


class TestReport:
    def test_to_dict(self, config, mock_csv):
        mock_csv([["Foo", "w", "y", "n", "/foo", "{}", "", "n"]])
        data = run_generation(config, TargetFamily.MOCK_API).to_dict()
        assert data["family"] == "mock_api"
        assert data["status"] == "ok"
        assert data["stage"] == "done"
        assert data["created"] == 1
        assert data["rows"][0]["status"] == "created"
        assert data["rows"][0]["files"][0].endswith("FooFixture.json")
        json.dumps(data)
