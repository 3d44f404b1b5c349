"""
Tests for CLI commands — list, plan, install and global options.

Use cases are patched where they would touch the host; the CLI's job
is argument handling, output and exit status.
"""

from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from provisioner.core.services.provision.data.catalog import CATALOG
from provisioner.core.services.provision.domain.errors import (
    DependencyMissing,
    InterruptedByOperator,
    PermissionDenied,
    UnsupportedHost,
)
from provisioner.main import cli

USE_CASES = "provisioner.core.use_cases.provision"


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Toolchain Provisioner" in result.output
        assert "run-plan" not in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_explicit_config(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "nope.yml"), "plan"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestListCommand:
    def test_sorted_by_name(self):
        result = CliRunner().invoke(cli, ["list"])
        assert result.exit_code == 0

        lines = result.output.splitlines()
        names = [line.split()[0] for line in lines]
        assert names == sorted(e.name for e in CATALOG)
        assert f"cmake {next(e.version for e in CATALOG if e.name == 'cmake')}" in lines


class TestPlanCommand:
    def test_shows_decisions(self, make_entry, make_plan):
        plan = make_plan([(make_entry("m4", "1.4.19"), True), (make_entry("cmake", "3.28.1"), False)])

        with patch(f"{USE_CASES}.plan_run", return_value=plan) as mock_plan:
            result = CliRunner().invoke(cli, ["plan", "--prefix", "/opt/x", "--force"])

        assert result.exit_code == 0
        assert mock_plan.call_args.kwargs == {"prefix": "/opt/x", "force": True}
        assert "[1/2] m4 1.4.19 (skip; 1.4.19)" in result.output
        assert "[2/2] cmake 3.28.1 (build; not installed)" in result.output
        assert "1 of 2 to build" in result.output

    def test_unsupported_host(self):
        with patch(f"{USE_CASES}.plan_run", side_effect=UnsupportedHost("Linux", "Darwin")):
            result = CliRunner().invoke(cli, ["plan"])
        assert result.exit_code == 1
        assert "Darwin" in result.output


class TestInstallCommand:
    def test_success_exit_zero(self):
        with patch(f"{USE_CASES}.run_install", return_value=0) as mock_install:
            result = CliRunner().invoke(cli, ["install", "-p", "/opt/x", "-j", "3"])

        assert result.exit_code == 0
        kwargs = mock_install.call_args.kwargs
        assert kwargs["prefix"] == "/opt/x"
        assert kwargs["jobs"] == 3
        assert kwargs["force"] is False

    def test_child_status_propagates(self):
        with patch(f"{USE_CASES}.run_install", return_value=2):
            result = CliRunner().invoke(cli, ["install"])
        assert result.exit_code == 2

    def test_child_args_forward_flags(self, tmp_path: Path):
        config = tmp_path / "config.yml"
        config.write_text("jobs: 2\n")

        with patch(f"{USE_CASES}.run_install", return_value=0) as mock_install:
            CliRunner().invoke(cli, ["--verbose", "--config", str(config), "install"])

        assert mock_install.call_args.kwargs["child_args"] == ["--verbose", "--config", str(config)]

    def test_missing_dependency_lists_all(self):
        err = DependencyMissing(["perl", "cc|clang|gcc"])
        with patch(f"{USE_CASES}.run_install", side_effect=err):
            result = CliRunner().invoke(cli, ["install"])
        assert result.exit_code == 1
        assert "perl" in result.output
        assert "cc|clang|gcc" in result.output

    def test_permission_denied(self):
        with patch(f"{USE_CASES}.run_install", side_effect=PermissionDenied("/usr/local", "no sudo")):
            result = CliRunner().invoke(cli, ["install"])
        assert result.exit_code == 1
        assert "/usr/local" in result.output

    def test_interrupt_exit_code(self):
        with patch(f"{USE_CASES}.run_install", side_effect=InterruptedByOperator(2)):
            result = CliRunner().invoke(cli, ["install"])
        assert result.exit_code == 130

    def test_negative_jobs_rejected(self):
        result = CliRunner().invoke(cli, ["install", "-j", "-1"])
        assert result.exit_code == 2


class TestRunPlanCommand:
    def test_build_failure_prints_log_tail(self, tmp_path: Path):
        from provisioner.core.services.provision.domain.errors import BuildStepFailure

        plan_file = tmp_path / "plan.json"
        plan_file.write_text("{}")
        log = tmp_path / "m4.log"
        log.write_text("checking for gcc... no\nconfigure: error: no C compiler\n")

        err = BuildStepFailure("m4", "configure", returncode=77, log_path=log)
        with patch(f"{USE_CASES}.run_orchestrator", side_effect=err):
            result = CliRunner().invoke(cli, ["run-plan", "--plan", str(plan_file)])

        assert result.exit_code == 1
        assert "  | configure: error: no C compiler" in result.output
        assert "m4: configure failed (exit 77)" in result.output
