"""
L2 Resolver — Skip planning.

Decides, per catalog entry, whether an adequate version is already
installed.  The catalog is never reordered or filtered; skipped
entries stay in the plan so progress counters cover the whole catalog.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from provisioner.core.models.catalog import CatalogEntry
from provisioner.core.models.plan import EntryDecision, RunPlan
from provisioner.core.services.provision.data.constants import CONNECT_TIMEOUT
from provisioner.core.services.provision.detection.tool_version import get_installed_version
from provisioner.core.services.provision.domain.version import is_at_least

logger = logging.getLogger(__name__)

VersionProbe = Callable[[CatalogEntry, str], str | None]


def decide_entry(
    entry: CatalogEntry,
    installed_version: str | None,
    *,
    force: bool = False,
) -> EntryDecision:
    """Skip iff not forced and the installed version reaches the pinned one."""
    skip = (not force) and is_at_least(installed_version, entry.version)
    return EntryDecision(entry=entry, skip=skip, installed_version=installed_version)


def build_run_plan(
    catalog: Iterable[CatalogEntry],
    *,
    prefix: str,
    jobs: int,
    download_dir: str,
    force: bool = False,
    connect_timeout: int = CONNECT_TIMEOUT,
    probe: VersionProbe | None = None,
) -> RunPlan:
    """Compute the RunPlan for one invocation.

    With ``force`` no installed version is probed and nothing is skipped.

    Args:
        catalog: Entries in build order.
        prefix: Absolute installation directory.
        jobs: Resolved ``make -j`` value (>= 1).
        download_dir: Archive cache directory.
        force: Rebuild every entry.
        connect_timeout: Seconds for URL probes.
        probe: ``(entry, prefix) -> installed version | None``; defaults
            to running the entry's version command.

    Returns:
        RunPlan with one decision per entry, in catalog order.
    """
    probe = probe or get_installed_version
    decisions: list[EntryDecision] = []
    for entry in catalog:
        installed = None if force else probe(entry, prefix)
        decision = decide_entry(entry, installed, force=force)
        logger.info(
            "%s %s: installed=%s → %s",
            entry.name, entry.version, installed or "-",
            "skip" if decision.skip else "build",
        )
        decisions.append(decision)

    return RunPlan(
        prefix=prefix,
        jobs=jobs,
        force=force,
        decisions=decisions,
        download_dir=download_dir,
        connect_timeout=connect_timeout,
    )
