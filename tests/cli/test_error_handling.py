"""Tests for CLI error handling.

Verifies:
    - Usage errors (no recipe source, several sources, bad options) exit 2.
    - nix2sbom errors print ``Error: ...`` on stderr and exit 1.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from nix2sbom.cli.main import cli
from tests.helpers import DERIVATIONS_FIXTURE


class TestRecipeSourceSelection:
    @pytest.mark.parametrize("command", ["sbom", "stats", "tree"])
    def test_no_source_is_a_usage_error(self, runner: CliRunner, command: str) -> None:
        result = runner.invoke(cli, [command, "--no-meta"])
        assert result.exit_code == 2
        assert "Exactly one of TARGET, --file or --current-system" in result.output

    def test_two_sources_is_a_usage_error(self, runner: CliRunner) -> None:
        result = runner.invoke(
            cli, ["sbom", "/nix/store/x.drv", "--file", str(DERIVATIONS_FIXTURE), "--no-meta"]
        )
        assert result.exit_code == 2

    def test_missing_file_is_a_usage_error(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["sbom", "--file", "/nonexistent/derivations.json", "--no-meta"])
        assert result.exit_code == 2
        assert "does not exist" in result.output


class TestOptionValidation:
    def test_unknown_format(self, runner: CliRunner, fixture_args: list[str]) -> None:
        result = runner.invoke(cli, ["sbom", *fixture_args, "--format", "xlsx"])
        assert result.exit_code == 2
        assert "unknown format" in result.output

    def test_unknown_serialization(self, runner: CliRunner, fixture_args: list[str]) -> None:
        result = runner.invoke(cli, ["sbom", *fixture_args, "--serialization-format", "toml"])
        assert result.exit_code == 2


class TestNix2SbomErrors:
    def test_xml_is_reported(self, runner: CliRunner, fixture_args: list[str]) -> None:
        result = runner.invoke(cli, ["sbom", *fixture_args, "--serialization-format", "xml"])
        assert result.exit_code == 1
        assert "Error: XML is not supported for CycloneDX" in result.stderr

    def test_invalid_json_file(self, runner: CliRunner, tmp_path: Path) -> None:
        broken = tmp_path / "broken.json"
        broken.write_text("{")
        result = runner.invoke(cli, ["stats", "--file", str(broken), "--no-meta"])
        assert result.exit_code == 1
        assert "Error: Invalid JSON" in result.stderr

    def test_dangling_reference(self, runner: CliRunner, tmp_path: Path) -> None:
        store = tmp_path / "dangling.json"
        store.write_text(
            json.dumps(
                {
                    "/nix/store/a.drv": {
                        "outputs": {"out": {"path": "/nix/store/a"}},
                        "inputDrvs": {"/nix/store/ghost.drv": ["out"]},
                    }
                }
            )
        )
        result = runner.invoke(cli, ["tree", "--file", str(store), "--no-meta"])
        assert result.exit_code == 1
        assert "ghost" in result.stderr

    def test_unknown_mirror(self, runner: CliRunner, tmp_path: Path) -> None:
        store = tmp_path / "mirror.json"
        store.write_text(
            json.dumps(
                {
                    "/nix/store/a.drv": {
                        "outputs": {"out": {"path": "/nix/store/a"}},
                        "env": {"name": "a-1.0", "url": "mirror://nosuchmirror/a-1.0.tar.gz"},
                    }
                }
            )
        )
        result = runner.invoke(cli, ["sbom", "--file", str(store), "--no-meta"])
        assert result.exit_code == 1
        assert "Unknown mirror name: nosuchmirror" in result.stderr
