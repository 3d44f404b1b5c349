"""
L3 Detection — Required executable checking.

A specifier is an executable name (looked up on PATH), an absolute
path (must exist and be executable), or a ``|``-separated list of
alternatives of either kind.  Nothing is ever executed.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable

from provisioner.core.services.provision.domain.errors import DependencyMissing

logger = logging.getLogger(__name__)


def _is_resolvable(candidate: str, search_path: str | None = None) -> bool:
    """Check one alternative without running it."""
    candidate = candidate.strip()
    if not candidate:
        return False
    if os.sep in candidate:
        return os.path.isfile(candidate) and os.access(candidate, os.X_OK)
    return shutil.which(candidate, path=search_path) is not None


def find_missing(
    specifiers: Iterable[str],
    search_path: str | None = None,
) -> list[str]:
    """Return every specifier for which no alternative resolves.

    Args:
        specifiers: e.g. ``["make", "/usr/bin/tar", "cc|clang|gcc"]``.
        search_path: PATH override (default: the process PATH).

    Returns:
        Unsatisfied specifiers, in input order.  Empty when all resolve.
    """
    missing: list[str] = []
    for spec in specifiers:
        alternatives = spec.split("|")
        if any(_is_resolvable(alt, search_path) for alt in alternatives):
            continue
        missing.append(spec)
    if missing:
        logger.debug("Unresolvable tool specifiers: %s", missing)
    return missing


def require_tools(
    specifiers: Iterable[str],
    search_path: str | None = None,
) -> None:
    """Raise ``DependencyMissing`` listing ALL unsatisfied specifiers."""
    missing = find_missing(specifiers, search_path)
    if missing:
        raise DependencyMissing(missing)
