"""Tests for the recordstore CLI."""

import json

import pytest
from click.testing import CliRunner

from recordstore.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def metadata_dir(tmp_path, monkeypatch):
    resources = tmp_path / "metadata" / "resources"
    resources.mkdir(parents=True)
    (resources / "document.yaml").write_text("resource: document\n")
    monkeypatch.setenv("RECORDSTORE_METADATA_PATH", str(tmp_path / "metadata"))
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.delenv("RECORDSTORE_DEFAULT_ADAPTER", raising=False)
    return tmp_path / "metadata"


class TestCreateCommand:
    def test_create_prints_record(self, runner, metadata_dir):
        result = runner.invoke(cli, ["create", "document", "--data", '{"author": "A"}'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"author": "A", "id": "DOC-00001"}

    def test_create_eager(self, runner, metadata_dir):
        result = runner.invoke(cli, ["create", "document", "--data", '{"author": "A"}', "--eager"])

        assert result.exit_code == 0, result.output
        record = json.loads(result.output)
        assert record["author"] == "A"
        assert len(record["id"]) == 32

    def test_create_memory_adapter(self, runner, metadata_dir):
        result = runner.invoke(
            cli, ["create", "document", "--data", '{"author": "A"}', "--adapter", "memory"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["id"] == "DOC-00001"

    def test_unknown_resource(self, runner, metadata_dir):
        result = runner.invoke(cli, ["create", "comment", "--data", "{}"])
        assert result.exit_code == 1

    def test_invalid_json(self, runner, metadata_dir):
        result = runner.invoke(cli, ["create", "document", "--data", "{not json"])
        assert result.exit_code == 2
        assert "not valid JSON" in result.output


class TestResourcesCommands:
    def test_validate(self, runner, metadata_dir):
        result = runner.invoke(cli, ["resources", "validate"])

        assert result.exit_code == 0, result.output
        assert "Loaded 1 resources:" in result.output
        assert "✓ document" in result.output
        assert "All metadata is valid." in result.output

    def test_validate_reports_schema_errors(self, runner, metadata_dir):
        (metadata_dir / "resources" / "bad.yaml").write_text("notify: maybe\n")
        result = runner.invoke(cli, ["resources", "validate"])

        assert result.exit_code == 1
        assert "bad.yaml" in result.output

    def test_validate_single_file(self, runner, metadata_dir):
        path = metadata_dir / "resources" / "document.yaml"
        result = runner.invoke(cli, ["resources", "validate", "--path", str(path)])

        assert result.exit_code == 0, result.output
        assert "Loaded" not in result.output

    def test_list(self, runner, metadata_dir):
        result = runner.invoke(cli, ["resources", "list"])

        assert result.exit_code == 0, result.output
        assert "document  id=id  adapter=sql  [notify]" in result.output

    def test_list_empty(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("RECORDSTORE_METADATA_PATH", str(tmp_path))
        result = runner.invoke(cli, ["resources", "list"])
        assert "No resources defined." in result.output
