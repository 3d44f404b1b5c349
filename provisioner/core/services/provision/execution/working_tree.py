"""
L4 Execution — The transient working tree.

One temporary root per run holding, per entry, a source-extraction
directory, a build directory and a build log::

    provisioner-XXXX/
        plan.json
        src/<name>/
        build/<name>/
        logs/<name>.log

Removed unconditionally when the run ends.  Install steps may leave
root-owned files behind, so removal falls back to the escalated
session; without one the path is reported instead.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

import click

from provisioner.core.services.provision.execution.privilege import PrivilegeManager

logger = logging.getLogger(__name__)


class WorkingTree:
    """Context manager owning the run's temporary directory."""

    def __init__(self, root: str | Path, privilege: PrivilegeManager | None = None) -> None:
        self.root = Path(root)
        self.privilege = privilege or PrivilegeManager()
        self.removed = False

    @classmethod
    def create(
        cls,
        parent: str | Path | None = None,
        privilege: PrivilegeManager | None = None,
    ) -> WorkingTree:
        if parent is not None:
            Path(parent).mkdir(parents=True, exist_ok=True)
        root = tempfile.mkdtemp(prefix="provisioner-", dir=parent)
        logger.debug("Working tree: %s", root)
        return cls(root, privilege)

    # ── Layout ──────────────────────────────────────────────────

    @property
    def plan_path(self) -> Path:
        return self.root / "plan.json"

    @property
    def logs_dir(self) -> Path:
        return self.root / "logs"

    def source_dir(self, name: str) -> Path:
        return self.root / "src" / name

    def build_dir(self, name: str) -> Path:
        return self.root / "build" / name

    def log_path(self, name: str) -> Path:
        return self.logs_dir / f"{name}.log"

    # ── Lifecycle ───────────────────────────────────────────────

    def remove(self) -> bool:
        """Delete the tree.  Returns False (and logs the path) if it survives."""
        if self.removed or not self.root.exists():
            self.removed = True
            return True

        try:
            shutil.rmtree(self.root)
        except OSError as exc:
            if not self.privilege.escalated:
                logger.warning(
                    "Could not remove working tree %s (%s); remove it manually",
                    self.root, exc,
                )
                return False
            result = self.privilege.run(["rm", "-rf", str(self.root)])
            if result.returncode != 0:
                logger.warning(
                    "Could not remove working tree %s even with sudo; remove it manually",
                    self.root,
                )
                return False

        self.removed = True
        return True

    def __enter__(self) -> WorkingTree:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.remove():
            click.secho(f"Working tree left at {self.root}", fg="yellow", err=True)
