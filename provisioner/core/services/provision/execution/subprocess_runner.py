"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where build tools are spawned.  Output (stdout and
stderr) goes to the entry's log file, never to the terminal, so the
progress surface stays compact.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from provisioner.core.services.provision.execution.privilege import PrivilegeManager

logger = logging.getLogger(__name__)


def _run_logged(
    cmd: list[str],
    *,
    log_path: str | Path,
    cwd: str | Path | None = None,
    env_overrides: dict[str, str] | None = None,
    privilege: PrivilegeManager | None = None,
    elevated: bool = False,
) -> dict[str, Any]:
    """Run a command, appending all of its output to ``log_path``.

    Args:
        cmd: Command list.
        log_path: Per-entry build log (appended to).
        cwd: Working directory.
        env_overrides: Extra env vars.  Passed through ``env`` when the
            command is elevated, since sudo resets the environment.
        privilege: The run's PrivilegeManager.
        elevated: Run under the escalated account if one was acquired.

    Returns:
        ``{"ok": True, "returncode": 0, "elapsed_ms": N}`` on success,
        ``{"ok": False, "returncode": N, "error": "...", ...}`` on failure.
    """
    if env_overrides and elevated and privilege is not None and privilege.escalated:
        cmd = ["env", *(f"{k}={v}" for k, v in env_overrides.items()), *cmd]
    if elevated and privilege is not None:
        cmd = privilege.wrap(cmd)

    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    log_path = Path(log_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("Executing: %s (cwd=%s)", shlex.join(cmd), cwd)

    start = time.monotonic()
    with open(log_path, "a", encoding="utf-8") as log:
        log.write(f"\n$ {shlex.join(cmd)}\n")
        if cwd:
            log.write(f"# cwd: {cwd}\n")
        log.flush()
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=log,
                stderr=subprocess.STDOUT,
            )
        except OSError as exc:
            log.write(f"# failed to start: {exc}\n")
            return {
                "ok": False,
                "returncode": None,
                "error": f"Could not run {cmd[0]}: {exc}",
                "elapsed_ms": int((time.monotonic() - start) * 1000),
            }

    elapsed_ms = int((time.monotonic() - start) * 1000)
    if result.returncode == 0:
        return {"ok": True, "returncode": 0, "elapsed_ms": elapsed_ms}

    return {
        "ok": False,
        "returncode": result.returncode,
        "error": f"Command failed (exit {result.returncode})",
        "elapsed_ms": elapsed_ms,
    }
