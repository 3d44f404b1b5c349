"""
L3 Detection — Installed tool versions.

Read-only probes: runs each entry's version command and parses the
first line of its output.  The prefix's ``bin`` directory is searched
before the rest of PATH so a previous run's install is found first.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess

from provisioner.core.models.catalog import CatalogEntry
from provisioner.core.services.provision.data.constants import VERSION_PROBE_TIMEOUT
from provisioner.core.services.provision.domain.version import parse_version_banner

logger = logging.getLogger(__name__)


def probe_search_path(prefix: str) -> str:
    """PATH with ``<prefix>/bin`` in front."""
    current = os.environ.get("PATH", os.defpath)
    return os.pathsep.join([os.path.join(prefix, "bin"), current])


def get_installed_version(entry: CatalogEntry, prefix: str) -> str | None:
    """Get the installed version of a catalog tool.

    Entries with ``probe_prefix_only`` are looked up in ``<prefix>/bin``
    alone, so an unrelated system tool of the same name cannot satisfy
    them.

    Returns:
        Version string (e.g. ``"2.16.03"``) or ``None`` if the tool is
        not installed or its version can't be determined.
    """
    cmd = entry.probe_command
    if entry.probe_prefix_only:
        search_path = os.path.join(prefix, "bin")
    else:
        search_path = probe_search_path(prefix)
    cli = shutil.which(cmd[0], path=search_path)
    if not cli:
        return None

    try:
        result = subprocess.run(
            [cli, *cmd[1:]],
            capture_output=True,
            text=True,
            timeout=VERSION_PROBE_TIMEOUT,
            stdin=subprocess.DEVNULL,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.debug("Version probe for %s failed: %s", entry.name, exc)
        return None

    # Some tools print the banner on stderr
    output = result.stdout if result.stdout.strip() else result.stderr
    version = parse_version_banner(output)
    logger.debug("Installed %s: %s (%s)", entry.name, version, cli)
    return version
