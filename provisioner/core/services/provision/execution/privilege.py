"""
L4 Execution — Privilege management.

Escalation is strictly opt-in: it is only attempted when something is
going to be built AND the prefix is not writable by the current user.
Once acquired it is reused, never re-prompted, by every privileged
operation in the run (install steps, fixups, cleanup).

The orchestrator runs in a child process that shares the terminal
session, so it relies on sudo's cached credentials and only ever calls
``sudo -n``.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable
from pathlib import Path

from provisioner.core.services.provision.domain.errors import PermissionDenied

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


class PrivilegeManager:
    """Tracks whether this run has (and needs) an escalated sudo session."""

    def __init__(self, escalated: bool = False, *, runner: Runner = subprocess.run) -> None:
        self._escalated = escalated
        self._run = runner

    @property
    def escalated(self) -> bool:
        return self._escalated

    def wrap(self, cmd: list[str]) -> list[str]:
        """Prefix ``cmd`` with non-interactive sudo when escalated."""
        if not self._escalated or os.geteuid() == 0:
            return list(cmd)
        return ["sudo", "-n", *cmd]

    def run(self, cmd: list[str], **kwargs) -> subprocess.CompletedProcess:
        """Run a short privileged helper (mkdir, rm, mv ...)."""
        kwargs.setdefault("capture_output", True)
        kwargs.setdefault("text", True)
        kwargs.setdefault("stdin", subprocess.DEVNULL)
        return self._run(self.wrap(cmd), **kwargs)

    # ── Acquisition ─────────────────────────────────────────────

    def ensure_prefix(self, prefix: str | Path, pending: int) -> bool:
        """Make sure ``prefix`` exists and is writable, escalating if needed.

        Args:
            prefix: Installation directory.
            pending: Number of entries that will be built.  Zero means
                the run touches nothing, so nothing is probed.

        Returns:
            True if escalation was acquired.

        Raises:
            PermissionDenied: prefix unwritable and escalation unavailable.
        """
        if pending <= 0:
            logger.debug("Nothing to build, skipping prefix probe")
            return False

        prefix = Path(prefix)
        if self._user_writable(prefix):
            logger.debug("Prefix %s writable by current user", prefix)
            return False

        logger.info("Prefix %s not writable, requesting elevated privileges", prefix)
        if not self._validate():
            raise PermissionDenied(prefix, "could not obtain sudo privileges")

        self._escalated = True
        mkdir = self.run(["mkdir", "-p", str(prefix)])
        probe = self.run(["test", "-w", str(prefix)])
        if mkdir.returncode != 0 or probe.returncode != 0:
            self._escalated = False
            reason = (mkdir.stderr or probe.stderr or "").strip()
            raise PermissionDenied(prefix, reason or "not writable even with sudo")
        return True

    def keepalive(self) -> bool:
        """Refresh the cached sudo timestamp without prompting."""
        if not self._escalated or os.geteuid() == 0:
            return True
        result = self._run(
            ["sudo", "-n", "-v"],
            capture_output=True,
            stdin=subprocess.DEVNULL,
        )
        if result.returncode != 0:
            logger.warning("sudo credential refresh failed (exit %s)", result.returncode)
            return False
        return True

    def _user_writable(self, prefix: Path) -> bool:
        if prefix.is_dir():
            return os.access(prefix, os.W_OK | os.X_OK)
        try:
            prefix.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(prefix, os.W_OK | os.X_OK)

    def _validate(self) -> bool:
        """Silent ``sudo -n true`` first; interactive ``sudo -v`` only if that fails."""
        if os.geteuid() == 0:
            return True
        try:
            silent = self._run(
                ["sudo", "-n", "true"],
                capture_output=True,
                stdin=subprocess.DEVNULL,
            )
            if silent.returncode == 0:
                return True
            interactive = self._run(["sudo", "-v"])
        except OSError as exc:
            logger.error("sudo is not available: %s", exc)
            return False
        return interactive.returncode == 0
