"""
Provision use cases — install, plan preview, catalog listing, and the
orchestrator-child entrypoint.

The CLI calls these; they raise ``ProvisionError`` subclasses and the
CLI turns those into a one-line diagnostic and an exit status.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import click

from provisioner.core.config.loader import Settings
from provisioner.core.models.catalog import CatalogEntry
from provisioner.core.models.plan import RunPlan
from provisioner.core.services.provision.data.catalog import CATALOG
from provisioner.core.services.provision.detection.host import check_host, resolve_jobs
from provisioner.core.services.provision.detection.system_deps import require_tools
from provisioner.core.services.provision.execution.privilege import PrivilegeManager
from provisioner.core.services.provision.execution.working_tree import WorkingTree
from provisioner.core.services.provision.orchestration.orchestrator import BuildOrchestrator
from provisioner.core.services.provision.orchestration.supervisor import ProcessSupervisor
from provisioner.core.services.provision.resolver.skip_plan import build_run_plan

logger = logging.getLogger(__name__)


def list_catalog(catalog: Iterable[CatalogEntry] = CATALOG) -> list[tuple[str, str]]:
    """``(name, version)`` pairs sorted by name."""
    return sorted((e.name, e.version) for e in catalog)


def plan_run(
    settings: Settings,
    *,
    prefix: str | None = None,
    jobs: int | None = None,
    force: bool = False,
    catalog: Iterable[CatalogEntry] = CATALOG,
) -> RunPlan:
    """Host checks, then the skip plan.  Writes nothing."""
    check_host(settings.required_os)
    require_tools(settings.required_tools)
    return build_run_plan(
        catalog,
        prefix=settings.resolved_prefix(prefix),
        jobs=resolve_jobs(jobs if jobs is not None else settings.jobs),
        download_dir=settings.resolved_download_dir(),
        force=force,
        connect_timeout=settings.connect_timeout,
    )


def orchestrator_command(plan_path: Path, child_args: Sequence[str] = ()) -> list[str]:
    """Command line that runs the orchestrator child on ``plan_path``."""
    return [
        sys.executable, "-m", "provisioner.main",
        *child_args,
        "run-plan", "--plan", str(plan_path),
    ]


def run_install(
    settings: Settings,
    *,
    prefix: str | None = None,
    jobs: int | None = None,
    force: bool = False,
    catalog: Iterable[CatalogEntry] = CATALOG,
    child_args: Sequence[str] = (),
    privilege: PrivilegeManager | None = None,
    echo: Callable[[str], None] = click.echo,
) -> int:
    """Provision the catalog into the prefix.

    Returns:
        Process exit status (the orchestrator child's, or 0).
    """
    plan = plan_run(settings, prefix=prefix, jobs=jobs, force=force, catalog=catalog)
    privilege = privilege or PrivilegeManager()

    if plan.pending_count == 0:
        # Nothing to build: no privilege probe, no working tree, no child.
        BuildOrchestrator(plan, None, privilege, echo=echo).run()
        return 0

    escalated = privilege.ensure_prefix(plan.prefix, plan.pending_count)
    plan = plan.model_copy(update={"escalated": escalated})

    with WorkingTree.create(settings.work_root, privilege) as tree:
        tree.plan_path.write_text(plan.model_dump_json(indent=2), encoding="utf-8")
        supervisor = ProcessSupervisor(
            orchestrator_command(tree.plan_path, child_args),
            tree=tree,
            privilege=privilege,
            heartbeat_interval=settings.heartbeat_interval,
            keepalive_interval=settings.sudo_keepalive_interval,
        )
        return supervisor.run()


def run_orchestrator(
    plan_path: Path,
    *,
    echo: Callable[[str], None] = click.echo,
) -> int:
    """Child-process side: load the serialized plan and build it.

    Returns:
        Number of entries built.
    """
    plan = RunPlan.model_validate_json(Path(plan_path).read_text(encoding="utf-8"))
    privilege = PrivilegeManager(escalated=plan.escalated)
    tree = WorkingTree(Path(plan_path).parent, privilege)
    return BuildOrchestrator(plan, tree, privilege, echo=echo).run()


def tail_log(path: str | Path | None, lines: int = 20) -> list[str]:
    """Last ``lines`` lines of a build log (empty if unreadable)."""
    if not path:
        return []
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []
    return content.splitlines()[-lines:]
