"""Tests for the goarchunit CLI - check and packages commands."""

import json

import pytest
from typer.testing import CliRunner

from goarchunit import __version__
from goarchunit.cli import app

runner = CliRunner()

WIDE = {"COLUMNS": "200"}


@pytest.fixture
def clean_project(go_project):
    return go_project({"app.go": "package app\n\nfunc run() {}\n"})


@pytest.fixture
def misplaced_config(go_project):
    return go_project(
        {
            "app.go": "package app\n\nfunc run() {}\n",
            "deploy/app.yaml": "replicas: 1\n",
        }
    )


class TestCheckCommand:
    """Test exit codes and report output of `goarchunit check`."""

    def test_clean_project(self, clean_project):
        """No violations exits 0."""
        result = runner.invoke(app, ["check", str(clean_project), "--source", "filesystem"])
        assert result.exit_code == 0, result.output
        assert "No architecture violations found." in result.output

    def test_violations_exit_1(self, misplaced_config):
        """Violations are rendered as markdown and exit 1."""
        result = runner.invoke(
            app, ["check", str(misplaced_config), "--source", "filesystem"], env=WIDE
        )
        assert result.exit_code == 1
        assert "## Architecture violations found" in result.output
        assert "### Folder Conventions" in result.output
        assert "is not in the allowed folder 'configs'" in result.output

    def test_config_folder_option(self, misplaced_config):
        """--config-folder moves the allowed folder."""
        result = runner.invoke(
            app,
            ["check", str(misplaced_config), "--source", "filesystem", "--config-folder", "deploy"],
        )
        assert result.exit_code == 0, result.output

    def test_json_output(self, misplaced_config):
        """--json prints the report as a JSON object."""
        result = runner.invoke(
            app, ["check", str(misplaced_config), "--source", "filesystem", "--json"]
        )
        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert list(report["categories"]) == ["Folder"]
        assert len(report["categories"]["Folder"]) == 1
        assert report["general_errors"] == []

    def test_json_output_clean(self, clean_project):
        """A clean project prints an empty report."""
        result = runner.invoke(
            app, ["check", str(clean_project), "--source", "filesystem", "--json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"categories": {}, "general_errors": []}

    def test_missing_module_exit_2(self, tmp_path):
        """A folder without go.mod cannot be loaded."""
        result = runner.invoke(app, ["check", str(tmp_path), "--source", "filesystem"])
        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_invalid_source_exit_2(self, clean_project):
        """An unknown metadata source is a configuration error."""
        result = runner.invoke(
            app, ["check", str(clean_project), "--source", "bazel"], env=WIDE
        )
        assert result.exit_code == 2
        assert "metadata_source" in result.output
        assert "must be one of" in result.output
        assert "key=metadata_source" not in result.output

    def test_verbose_error_details(self, clean_project):
        """--verbose prints every error detail."""
        result = runner.invoke(
            app, ["check", str(clean_project), "--source", "bazel", "--verbose"], env=WIDE
        )
        assert result.exit_code == 2
        assert "key=metadata_source" in result.output

    def test_config_file(self, misplaced_config, tmp_path):
        """Settings can come from an explicit TOML file."""
        config = tmp_path / "ci.toml"
        config.write_text('metadata_source = "filesystem"\nconfig_folder = "deploy"\n')
        result = runner.invoke(app, ["check", str(misplaced_config), "--config", str(config)])
        assert result.exit_code == 0, result.output


class TestPackagesCommand:
    """Test `goarchunit packages`."""

    def test_lists_application_packages(self, layered_root):
        """Application packages are listed with their non-standard imports."""
        result = runner.invoke(
            app, ["packages", str(layered_root), "--source", "filesystem"], env=WIDE
        )
        assert result.exit_code == 0, result.output
        assert "Packages of example.com/shop" in result.output
        assert "example.com/shop/service" in result.output
        assert "context" not in result.output

    def test_std_imports(self, layered_root):
        """--std includes standard library imports."""
        result = runner.invoke(
            app, ["packages", str(layered_root), "--source", "filesystem", "--std"], env=WIDE
        )
        assert result.exit_code == 0, result.output
        assert "context" in result.output


class TestVersion:
    """Test the version flag."""

    def test_version(self):
        """--version prints the package version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
