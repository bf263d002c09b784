"""Unit tests for the portlint CLI."""

import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from portlint import __version__
from portlint.cli import FATAL_EXIT_CODE, app


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep rich from wrapping long paths in captured output."""
    monkeypatch.setattr("portlint.cli.console", Console(width=200))
    monkeypatch.setattr("portlint.binary.inspector.shutil.which", lambda name: None)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Config rooted at tmp_path with header parsing disabled."""
    path = tmp_path / ".portlint.json"
    path.write_text(json.dumps({"tooling": {"headerParsing": False}}), encoding="utf-8")
    return path


class TestValidateCommand:
    """Test the validate command."""

    def test_clean_package(self, runner, config_file, clean_dynamic_package):
        """Test that a clean package exits with 0."""
        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "--target-arch", "x64", "--config", str(config_file)
        ])

        assert result.exit_code == 0
        assert "-- Performing post-build validation done" in result.stdout

    def test_violation_exit_code(self, runner, config_file, clean_dynamic_package):
        """Test that violations exit with 1 and name the portfile."""
        (clean_dynamic_package / "bin" / "tool.exe").write_text("x", encoding="utf-8")

        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file)
        ])

        assert result.exit_code == 1
        assert "EXEs are not valid distribution targets" in result.stdout
        assert "Found 1 error(s). Please correct the portfile:" in result.stdout

    def test_json_output(self, runner, config_file, clean_dynamic_package):
        """Test JSON report output."""
        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file), "--format", "json"
        ])

        data = json.loads(result.stdout)
        assert data["error_count"] == 0
        assert data["package"] == "zlib"
        assert {o["check"]: o["state"] for o in data["outcomes"]}["dll_exports"] == "not_evaluated"

    def test_json_build_descriptor(self, runner, tmp_path, config_file, clean_dynamic_package):
        """Test reading the build configuration from a JSON descriptor."""
        descriptor = tmp_path / "build.json"
        descriptor.write_text(json.dumps({
            "preBuild": {"targetArchitecture": "x64"},
            "build": {"libraryLinkage": "dynamic", "crtLinkage": "dynamic"},
        }), encoding="utf-8")

        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-c", str(config_file), "--build-info", str(descriptor)
        ])

        assert result.exit_code == 0

    def test_verbose_shows_outcome_table(self, runner, config_file, clean_dynamic_package):
        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file), "--verbose"
        ])

        assert result.exit_code == 0
        assert "include_directory" in result.stdout
        assert "not_evaluated" in result.stdout

    def test_fatal_error_exit_code(self, runner, tmp_path, clean_dynamic_package):
        """Test that unreadable binaries abort with the fatal exit code."""
        config_file = tmp_path / ".portlint.json"
        config_file.write_text("{}", encoding="utf-8")

        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file)
        ])

        assert result.exit_code == FATAL_EXIT_CODE
        assert "Fatal:" in result.stdout

    def test_missing_dumpbin_exit_code(self, runner, tmp_path, clean_dynamic_package):
        """Test that a configured dumpbin that cannot be started is fatal."""
        config_file = tmp_path / ".portlint.json"
        config_file.write_text(json.dumps({
            "tooling": {"headerParsing": False, "dumpbin": str(tmp_path / "absent" / "dumpbin.exe")},
        }), encoding="utf-8")

        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file)
        ])

        assert result.exit_code == FATAL_EXIT_CODE
        assert "Fatal:" in result.stdout
        assert "dumpbin.exe" in result.stdout

    def test_target_arch_required(self, runner, config_file, clean_dynamic_package):
        result = runner.invoke(app, ["validate", "zlib", "x64-windows", "-c", str(config_file)])
        assert result.exit_code == 1
        assert "--target-arch is required" in result.stdout

    def test_missing_build_info(self, runner, config_file, package_dir):
        result = runner.invoke(app, ["validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file)])
        assert result.exit_code == 1
        assert "BUILD_INFO not found" in result.stdout

    def test_invalid_format(self, runner, config_file):
        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file), "-f", "xml"
        ])
        assert result.exit_code == 1
        assert "Invalid format 'xml'" in result.stdout

    def test_invalid_build_type(self, runner, config_file):
        result = runner.invoke(app, [
            "validate", "zlib", "x64-windows", "-a", "x64", "-c", str(config_file), "--build-type", "profile"
        ])
        assert result.exit_code == 1
        assert "Invalid build type 'profile'" in result.stdout


class TestOtherCommands:
    """Test version and policy listing."""

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"portlint version {__version__}" in result.stdout

    def test_policies(self, runner):
        result = runner.invoke(app, ["policies"])
        assert result.exit_code == 0
        assert "VCPKG_POLICY_DLLS_WITHOUT_LIBS" in result.stdout
        assert "PolicyEmptyIncludeFolder" in result.stdout
