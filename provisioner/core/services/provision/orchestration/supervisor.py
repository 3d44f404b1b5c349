"""
L5 Orchestration — Process supervisor.

Runs the orchestrator as a child process in its own process group and
stays responsive while it works:

- a heartbeat prints a single ``.`` every interval while the child is
  alive, so output watchdogs don't mistake a long compile for a hang;
- SIGINT / SIGTERM disable themselves, report the working tree and
  kill the child's whole process group;
- a non-zero child status is reported and gets the same teardown.

The child stays in the caller's session (``process_group=0``, not a
new session) so sudo's per-terminal credential cache still applies.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
import time
from collections.abc import Callable
from typing import TextIO

import click

from provisioner.core.services.provision.data.constants import (
    HEARTBEAT_INTERVAL,
    SUDO_KEEPALIVE_INTERVAL,
)
from provisioner.core.services.provision.domain.errors import InterruptedByOperator
from provisioner.core.services.provision.execution.privilege import PrivilegeManager
from provisioner.core.services.provision.execution.working_tree import WorkingTree

logger = logging.getLogger(__name__)

_HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ProcessSupervisor:
    """Launch, watch and (if needed) tear down the orchestrator process."""

    def __init__(
        self,
        command: list[str],
        *,
        tree: WorkingTree,
        privilege: PrivilegeManager,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
        keepalive_interval: float = SUDO_KEEPALIVE_INTERVAL,
        stream: TextIO | None = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.command = command
        self.tree = tree
        self.privilege = privilege
        self.heartbeat_interval = heartbeat_interval
        self.keepalive_interval = keepalive_interval
        self.stream = stream or sys.stdout
        self._popen = popen
        self._proc: subprocess.Popen | None = None
        self._previous: dict[int, object] = {}

    def run(self) -> int:
        """Run the orchestrator to completion.

        Returns:
            The child's exit status (0 on success).

        Raises:
            InterruptedByOperator: a handled signal arrived.
        """
        self._install_handlers()
        interrupted = False
        try:
            self._proc = self._popen(self.command, process_group=0)
            logger.debug("Orchestrator pid %d", self._proc.pid)
            status = self._heartbeat()
            if status != 0:
                click.secho(
                    f"\nProvisioning failed (orchestrator exit status {status})",
                    fg="red", err=True,
                )
                self._report_tree()
                self._terminate_group()
            return status
        except InterruptedByOperator:
            interrupted = True
            raise
        finally:
            if not interrupted:
                self._restore_handlers()

    # ── Heartbeat ───────────────────────────────────────────────

    def _heartbeat(self) -> int:
        """Wait for the child, ticking while it is alive."""
        assert self._proc is not None
        last_keepalive = time.monotonic()
        while True:
            try:
                return self._proc.wait(timeout=self.heartbeat_interval)
            except subprocess.TimeoutExpired:
                pass
            self.stream.write(".")
            self.stream.flush()

            if (
                self.privilege.escalated
                and self.keepalive_interval > 0
                and time.monotonic() - last_keepalive >= self.keepalive_interval
            ):
                self.privilege.keepalive()
                last_keepalive = time.monotonic()

    # ── Signals & teardown ──────────────────────────────────────

    def _install_handlers(self) -> None:
        for signum in _HANDLED_SIGNALS:
            self._previous[signum] = signal.signal(signum, self._on_signal)

    def _restore_handlers(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def _on_signal(self, signum: int, frame) -> None:
        # Ignore repeats while tearing down
        for handled in _HANDLED_SIGNALS:
            signal.signal(handled, signal.SIG_IGN)
        click.secho(f"\nInterrupted (signal {signum})", fg="yellow", err=True)
        self._report_tree()
        self._terminate_group()
        raise InterruptedByOperator(signum)

    def _report_tree(self) -> None:
        click.echo(f"Working tree: {self.tree.root}", err=True)
        click.echo(f"Build logs:   {self.tree.logs_dir}", err=True)

    def _terminate_group(self) -> None:
        """SIGKILL the orchestrator's process group, reaping the leader."""
        if self._proc is None:
            return
        try:
            os.killpg(self._proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError) as exc:
            logger.debug("Process group %d already gone: %s", self._proc.pid, exc)
        try:
            self._proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            logger.warning("Orchestrator pid %d did not exit after SIGKILL", self._proc.pid)
