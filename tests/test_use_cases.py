"""
Tests for the provision use cases — planning, in-process no-op runs,
supervisor hand-off and the child entrypoint.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from provisioner.core.models.plan import RunPlan
from provisioner.core.services.provision.domain.errors import DependencyMissing
from provisioner.core.use_cases.provision import (
    list_catalog,
    orchestrator_command,
    plan_run,
    run_install,
    tail_log,
)

USE_CASES = "provisioner.core.use_cases.provision"


def _installed(version: str | None):
    return patch(
        "provisioner.core.services.provision.resolver.skip_plan.get_installed_version",
        return_value=version,
    )


class TestListCatalog:
    def test_sorted(self, make_entry):
        entries = [make_entry("ninja"), make_entry("autoconf"), make_entry("m4")]
        assert [name for name, _ in list_catalog(entries)] == ["autoconf", "m4", "ninja"]


class TestPlanRun:
    def test_dependencies_checked_first(self, settings, make_entry):
        settings = settings.model_copy(update={"required_tools": ["no-such-tool-xyz"]})
        with pytest.raises(DependencyMissing):
            plan_run(settings, catalog=[make_entry()])

    def test_cli_overrides(self, settings, make_entry, tmp_path: Path):
        with _installed(None):
            plan = plan_run(settings, prefix=str(tmp_path / "other"), jobs=7, catalog=[make_entry()])
        assert plan.prefix == str((tmp_path / "other").resolve())
        assert plan.jobs == 7
        assert plan.pending_count == 1


class TestRunInstall:
    def test_nothing_pending_runs_in_process(self, settings, make_entry):
        lines: list[str] = []
        with _installed("9.9.9"), \
             patch(f"{USE_CASES}.ProcessSupervisor") as mock_sup, \
             patch(f"{USE_CASES}.PrivilegeManager.ensure_prefix") as mock_priv:
            status = run_install(settings, catalog=[make_entry()], echo=lines.append)

        assert status == 0
        assert lines == ["Skip [1/1] demo 1.2.3 (installed 9.9.9)"]
        mock_sup.assert_not_called()
        mock_priv.assert_not_called()
        assert not Path(settings.work_root).exists()

    def test_pending_hands_plan_to_supervisor(self, settings, make_entry):
        seen = {}

        def fake_supervisor(command, *, tree, **kwargs):
            seen["command"] = command
            seen["plan"] = json.loads(tree.plan_path.read_text())
            seen["root"] = tree.root

            class _Sup:
                def run(self):
                    return 3

            return _Sup()

        with _installed(None), patch(f"{USE_CASES}.ProcessSupervisor", side_effect=fake_supervisor):
            status = run_install(settings, catalog=[make_entry()], child_args=["--quiet"])

        assert status == 3
        assert seen["command"][:3] == [sys.executable, "-m", "provisioner.main"]
        assert seen["command"][3:] == ["--quiet", "run-plan", "--plan", str(seen["root"] / "plan.json")]
        assert seen["plan"]["decisions"][0]["entry"]["name"] == "demo"
        assert seen["plan"]["escalated"] is False
        assert not seen["root"].exists()


class TestHelpers:
    def test_orchestrator_command(self, tmp_path: Path):
        cmd = orchestrator_command(tmp_path / "plan.json")
        assert cmd[-3:] == ["run-plan", "--plan", str(tmp_path / "plan.json")]

    def test_plan_roundtrips_through_json(self, make_plan, make_entry):
        plan = make_plan([(make_entry(), False)], escalated=True)
        restored = RunPlan.model_validate_json(plan.model_dump_json())
        assert restored == plan

    def test_tail_log(self, tmp_path: Path):
        log = tmp_path / "x.log"
        log.write_text("\n".join(f"line {i}" for i in range(50)))
        assert tail_log(log, lines=3) == ["line 47", "line 48", "line 49"]
        assert tail_log(tmp_path / "absent.log") == []
        assert tail_log(None) == []
