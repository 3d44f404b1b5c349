"""
L5 Orchestration — Build orchestrator.

Per non-skipped entry, strictly in catalog order::

    Pending → Downloaded → ChecksumOK → Extracted → Built → Installed

Any failed transition aborts the whole run; later entries are never
started.  Skipped entries print their installed version and advance
the ``[k/N]`` counter without doing any work.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import click

from provisioner.core.models.catalog import CatalogEntry
from provisioner.core.models.plan import RunPlan
from provisioner.core.services.provision.data.constants import DEFAULT_PREFIX
from provisioner.core.services.provision.execution.checksum import (
    digest_matches,
    file_digest,
    verify_file,
)
from provisioner.core.services.provision.execution.download import fetch
from provisioner.core.services.provision.execution.extract import extract_archive
from provisioner.core.services.provision.execution.privilege import PrivilegeManager
from provisioner.core.services.provision.execution.recipes import BuildContext, run_recipe
from provisioner.core.services.provision.execution.working_tree import WorkingTree

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """Drives fetch → verify → extract → build → install for a RunPlan."""

    def __init__(
        self,
        plan: RunPlan,
        tree: WorkingTree | None,
        privilege: PrivilegeManager,
        *,
        fetcher: Callable = fetch,
        extractor: Callable = extract_archive,
        recipe_runner: Callable[[BuildContext], None] = run_recipe,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self.plan = plan
        self.tree = tree
        self.privilege = privilege
        self._fetch = fetcher
        self._extract = extractor
        self._run_recipe = recipe_runner
        self._echo = echo

    def run(self) -> int:
        """Provision every pending entry, then clean up.

        ``tree`` may be None only when the plan has nothing to build.

        Returns:
            Number of entries actually built.
        """
        total = self.plan.total
        built = 0
        if self.tree is None and self.plan.pending_count:
            raise ValueError("a working tree is required when entries are pending")

        for index, decision in enumerate(self.plan.decisions, start=1):
            entry = decision.entry
            tag = f"[{index}/{total}] {entry.name} {entry.version}"

            if decision.skip:
                self._echo(f"Skip {tag} (installed {decision.installed_version})")
                continue

            archive = self.download(entry, tag)
            source_dir = self.extract(entry, archive, tag)
            self.build(entry, source_dir, tag)
            built += 1

        self.finish(built)
        return built

    # ── Steps ───────────────────────────────────────────────────

    def download(self, entry: CatalogEntry, tag: str) -> Path:
        """Ensure a verified archive is in the download cache."""
        archive = Path(self.plan.download_dir) / entry.package_filename

        if digest_matches(file_digest(archive), entry.expected_checksum):
            self._echo(f"Download {tag} (cached)")
            return archive

        self._echo(f"Download {tag}")
        self._fetch(archive, entry.candidate_urls, connect_timeout=self.plan.connect_timeout)

        verify_file(archive, entry.expected_checksum)
        return archive

    def extract(self, entry: CatalogEntry, archive: Path, tag: str) -> Path:
        assert self.tree is not None
        self._echo(f"Extract {tag}")
        return self._extract(archive, self.tree.source_dir(entry.name))

    def build(self, entry: CatalogEntry, source_dir: Path, tag: str) -> None:
        assert self.tree is not None
        self._echo(f"Build {tag} (log: {self.tree.log_path(entry.name)})")
        ctx = BuildContext(
            entry=entry,
            source_dir=source_dir,
            build_dir=self.tree.build_dir(entry.name),
            log_path=self.tree.log_path(entry.name),
            prefix=self.plan.prefix,
            jobs=self.plan.jobs,
            privilege=self.privilege,
        )
        self._run_recipe(ctx)
        logger.info("Installed %s %s into %s", entry.name, entry.version, self.plan.prefix)

    def finish(self, built: int) -> None:
        """Remove the working tree and print PATH guidance if it applies."""
        if self.tree is not None:
            self.tree.remove()

        if built and Path(self.plan.prefix) != Path(DEFAULT_PREFIX):
            bin_dir = Path(self.plan.prefix) / "bin"
            self._echo("")
            self._echo(f"Tools were installed into {bin_dir}.")
            self._echo("Add it to your PATH, e.g. in ~/.profile:")
            self._echo(f'    export PATH="{bin_dir}:$PATH"')
