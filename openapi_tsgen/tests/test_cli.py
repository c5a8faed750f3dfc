"""
Tests for the openapi-tsgen command line.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from openapi_tsgen import __version__
from openapi_tsgen.openapi_tsgen import openapi_tsgen

PETSTORE_DIR = Path(__file__).parent / "test_data" / "test_cases" / "petstore"

BROKEN_DOCUMENT = """\
openapi: 3.0.3
paths:
  /pets:
    get:
      responses:
        "410":
          $ref: "#/components/responses/Gone"
"""


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Tests for the click command."""

    def test_no_schema_prints_help(self, runner):
        result = runner.invoke(openapi_tsgen, [])

        assert result.exit_code == 0
        assert "Usage:" in result.output

    def test_version(self, runner):
        result = runner.invoke(openapi_tsgen, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_generates_from_yaml(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "types" / "api.ts"

            result = runner.invoke(openapi_tsgen, [str(PETSTORE_DIR / "schema.yml"), "-o", str(output)])

            assert result.exit_code == 0, result.output
            content = output.read_text()
            assert content.startswith("/*\n")
            assert f"Generator: openapi-tsgen@{__version__}" in content
            assert "export type Routes = {" in content

    def test_generates_from_json(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "api.ts"

            result = runner.invoke(
                openapi_tsgen,
                ["--schema", str(PETSTORE_DIR / "schema.json"), "--input-json", "--output", str(output)],
            )

            assert result.exit_code == 0, result.output
            assert "export const enum PetStatusEnum {" in output.read_text()

    def test_config_file(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = Path(tmpdir) / "config.json"
            config.write_text(json.dumps({"add_generation_comment": False}))
            output = Path(tmpdir) / "api.ts"

            result = runner.invoke(
                openapi_tsgen,
                ["-s", str(PETSTORE_DIR / "schema.yml"), "-c", str(config), "-o", str(output)],
            )

            assert result.exit_code == 0, result.output
            assert output.read_text().startswith("export const enum PetStatusEnum {")

    def test_regeneration_keeps_unchanged_file(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "api.ts"
            args = [str(PETSTORE_DIR / "schema.yml"), "-o", str(output)]

            runner.invoke(openapi_tsgen, args)
            output.write_text(output.read_text().replace("Generated at:", "Generated on:"))
            result = runner.invoke(openapi_tsgen, args)

            assert result.exit_code == 0
            assert "Generated on:" in output.read_text()

    def test_force_rewrites(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "api.ts"
            args = [str(PETSTORE_DIR / "schema.yml"), "-o", str(output)]

            runner.invoke(openapi_tsgen, args)
            output.write_text(output.read_text().replace("Generated at:", "Generated on:"))
            result = runner.invoke(openapi_tsgen, [*args, "--force"])

            assert result.exit_code == 0
            assert "Generated at:" in output.read_text()

    def test_reference_error_exits_without_writing(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            schema = Path(tmpdir) / "broken.yml"
            schema.write_text(BROKEN_DOCUMENT)
            output = Path(tmpdir) / "api.ts"

            result = runner.invoke(openapi_tsgen, [str(schema), "-o", str(output)])

            assert result.exit_code == 1
            assert 'path "/pets": get responses: missing components.responses: Gone' in result.output
            assert not output.exists()

    def test_missing_schema_file(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(openapi_tsgen, [str(Path(tmpdir) / "missing.yml")])

            assert result.exit_code == 1
            assert "read schema" in result.output

    def test_invalid_json(self, runner):
        with tempfile.TemporaryDirectory() as tmpdir:
            schema = Path(tmpdir) / "broken.json"
            schema.write_text("{not json")

            result = runner.invoke(openapi_tsgen, [str(schema), "--input-json", "-o", str(Path(tmpdir) / "a.ts")])

            assert result.exit_code == 1
            assert "unmarshal schema" in result.output
