"""
Tests for PrivilegeManager — escalation only when needed, reused once acquired.

sudo is never really invoked: a recording runner stands in for
``subprocess.run`` and scripts its return codes.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from provisioner.core.services.provision.domain.errors import PermissionDenied
from provisioner.core.services.provision.execution.privilege import PrivilegeManager


class RecordingRunner:
    """Fake ``subprocess.run``: records commands, answers from a table."""

    def __init__(self, returncodes: dict[tuple[str, ...], int] | None = None) -> None:
        self.calls: list[list[str]] = []
        self.returncodes = returncodes or {}

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        code = 0
        for prefix, rc in self.returncodes.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                code = rc
                break
        return subprocess.CompletedProcess(cmd, code, stdout="", stderr="")


@pytest.fixture(autouse=True)
def _not_root():
    with patch("provisioner.core.services.provision.execution.privilege.os.geteuid", return_value=1000):
        yield


class TestEnsurePrefix:
    def test_zero_pending_probes_nothing(self, tmp_path: Path):
        runner = RecordingRunner()
        pm = PrivilegeManager(runner=runner)
        prefix = tmp_path / "never-created"

        assert pm.ensure_prefix(prefix, pending=0) is False
        assert runner.calls == []
        assert not prefix.exists()
        assert pm.escalated is False

    def test_writable_prefix_needs_no_sudo(self, tmp_path: Path):
        runner = RecordingRunner()
        pm = PrivilegeManager(runner=runner)

        assert pm.ensure_prefix(tmp_path, pending=3) is False
        assert runner.calls == []
        assert pm.wrap(["make", "install"]) == ["make", "install"]

    def test_missing_prefix_created_as_user(self, tmp_path: Path):
        runner = RecordingRunner()
        pm = PrivilegeManager(runner=runner)
        prefix = tmp_path / "a" / "b"

        assert pm.ensure_prefix(prefix, pending=1) is False
        assert prefix.is_dir()
        assert runner.calls == []

    def test_escalates_silently_when_cached(self, tmp_path: Path):
        runner = RecordingRunner()
        pm = PrivilegeManager(runner=runner)

        with patch.object(PrivilegeManager, "_user_writable", return_value=False):
            assert pm.ensure_prefix(tmp_path / "p", pending=1) is True

        assert runner.calls[0] == ["sudo", "-n", "true"]
        assert ["sudo", "-v"] not in runner.calls
        assert ["sudo", "-n", "mkdir", "-p", str(tmp_path / "p")] in runner.calls
        assert ["sudo", "-n", "test", "-w", str(tmp_path / "p")] in runner.calls
        assert pm.escalated is True

    def test_prompts_only_after_silent_validation_fails(self, tmp_path: Path):
        runner = RecordingRunner({("sudo", "-n", "true"): 1})
        pm = PrivilegeManager(runner=runner)

        with patch.object(PrivilegeManager, "_user_writable", return_value=False):
            assert pm.ensure_prefix(tmp_path, pending=1) is True

        assert runner.calls[:2] == [["sudo", "-n", "true"], ["sudo", "-v"]]

    def test_escalation_refused(self, tmp_path: Path):
        runner = RecordingRunner({("sudo", "-n", "true"): 1, ("sudo", "-v"): 1})
        pm = PrivilegeManager(runner=runner)

        with patch.object(PrivilegeManager, "_user_writable", return_value=False):
            with pytest.raises(PermissionDenied) as exc_info:
                pm.ensure_prefix(tmp_path / "p", pending=1)

        assert str(tmp_path / "p") in str(exc_info.value)
        assert pm.escalated is False

    def test_escalated_write_still_fails(self, tmp_path: Path):
        runner = RecordingRunner({("sudo", "-n", "test"): 1})
        pm = PrivilegeManager(runner=runner)

        with patch.object(PrivilegeManager, "_user_writable", return_value=False):
            with pytest.raises(PermissionDenied):
                pm.ensure_prefix(tmp_path / "p", pending=1)
        assert pm.escalated is False

    def test_sudo_not_installed(self, tmp_path: Path):
        def runner(cmd, **kwargs):
            raise FileNotFoundError("sudo")

        pm = PrivilegeManager(runner=runner)
        with patch.object(PrivilegeManager, "_user_writable", return_value=False):
            with pytest.raises(PermissionDenied):
                pm.ensure_prefix(tmp_path, pending=1)


class TestReuse:
    def test_wrap_and_run_use_non_interactive_sudo(self):
        runner = RecordingRunner()
        pm = PrivilegeManager(escalated=True, runner=runner)

        assert pm.wrap(["make", "install"]) == ["sudo", "-n", "make", "install"]
        pm.run(["rm", "-rf", "/tmp/x"])
        pm.run(["mv", "a", "b"])
        assert runner.calls == [
            ["sudo", "-n", "rm", "-rf", "/tmp/x"],
            ["sudo", "-n", "mv", "a", "b"],
        ]
        assert ["sudo", "-v"] not in runner.calls

    def test_keepalive_only_when_escalated(self):
        runner = RecordingRunner()
        assert PrivilegeManager(runner=runner).keepalive() is True
        assert runner.calls == []

        assert PrivilegeManager(escalated=True, runner=runner).keepalive() is True
        assert runner.calls == [["sudo", "-n", "-v"]]

    def test_keepalive_failure_is_reported(self):
        runner = RecordingRunner({("sudo", "-n", "-v"): 1})
        assert PrivilegeManager(escalated=True, runner=runner).keepalive() is False

    def test_root_never_prefixes_sudo(self):
        with patch("provisioner.core.services.provision.execution.privilege.os.geteuid", return_value=0):
            pm = PrivilegeManager(escalated=True, runner=RecordingRunner())
            assert pm.wrap(["make", "install"]) == ["make", "install"]
