"""
L3 Detection — Host checks.
"""

from __future__ import annotations

import logging
import os
import platform

from provisioner.core.services.provision.domain.errors import UnsupportedHost

logger = logging.getLogger(__name__)


def check_host(required_os: str) -> str:
    """Fail with ``UnsupportedHost`` unless running on ``required_os``.

    Comparison is case-insensitive against ``platform.system()``.
    An empty ``required_os`` accepts any host.

    Returns:
        The detected system name.
    """
    system = platform.system()
    if required_os and system.lower() != required_os.lower():
        raise UnsupportedHost(system, required_os)
    logger.debug("Host check passed: %s", system)
    return system


def resolve_jobs(jobs: int | None) -> int:
    """Turn a job-count hint into a concrete ``make -j`` value (0 → CPU count)."""
    if jobs and jobs > 0:
        return jobs
    return os.cpu_count() or 1
