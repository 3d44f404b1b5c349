"""
L4 Execution — Archive download with URL fallback.

Candidate URLs are tried strictly in order.  Each gets a header-only
probe first; only a reachable URL is transferred.  The first complete
transfer wins and later URLs are never contacted.  Content is NOT
validated here; the checksum step is the authority on correctness.
"""

from __future__ import annotations

import logging
import os
import urllib.error
import urllib.request
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from provisioner.core.services.provision.data.constants import CONNECT_TIMEOUT, USER_AGENT
from provisioner.core.services.provision.domain.errors import DownloadFailure, PermissionDenied

logger = logging.getLogger(__name__)


@dataclass
class DownloadAttempt:
    """Outcome of trying one candidate URL."""

    url: str
    ok: bool = False
    stage: str = "probe"      # "probe" or "transfer"
    error: str = ""


@dataclass
class DownloadResult:
    """A successful fetch and the attempts that led to it."""

    path: Path
    url: str
    size_bytes: int = 0
    attempts: list[DownloadAttempt] = field(default_factory=list)

    @property
    def failed_attempts(self) -> list[DownloadAttempt]:
        return [a for a in self.attempts if not a.ok]


def probe_url(url: str, *, timeout: int = CONNECT_TIMEOUT) -> str | None:
    """Header-only existence check.

    Returns:
        None if the URL answered with a success status, else an error string.
    """
    req = urllib.request.Request(url, method="HEAD", headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = resp.getcode()
    except urllib.error.HTTPError as exc:
        return f"HTTP {exc.code}"
    except (urllib.error.URLError, OSError, ValueError) as exc:
        return str(getattr(exc, "reason", exc))
    if status is not None and status >= 400:
        return f"HTTP {status}"
    return None


def _ensure_creatable(dest: Path) -> None:
    """Fail fast if ``dest`` can't be written (a local problem, not a mirror one)."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PermissionDenied(dest.parent, str(exc)) from exc
    if not os.access(dest.parent, os.W_OK):
        raise PermissionDenied(dest.parent, "directory is not writable")
    if dest.exists() and not os.access(dest, os.W_OK):
        raise PermissionDenied(dest, "file is not writable")


def transfer(url: str, dest: Path, *, timeout: int = CONNECT_TIMEOUT) -> int:
    """Stream ``url`` into ``dest`` via a ``.part`` file.

    ``dest`` is only replaced once the whole body has arrived.  The
    timeout bounds each socket operation, not the whole transfer.

    Returns:
        Number of bytes written.
    """
    part = dest.with_name(dest.name + ".part")
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    written = 0
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp, open(part, "wb") as f:
            while True:
                chunk = resp.read(65536)
                if not chunk:
                    break
                f.write(chunk)
                written += len(chunk)
        os.replace(part, dest)
    finally:
        part.unlink(missing_ok=True)
    return written


def fetch(
    dest: str | Path,
    candidate_urls: Sequence[str],
    *,
    connect_timeout: int = CONNECT_TIMEOUT,
) -> DownloadResult:
    """Download ``dest`` from the first candidate URL that works.

    Args:
        dest: Destination file path.
        candidate_urls: Ordered, non-empty list of URLs.
        connect_timeout: Seconds for the probe and each socket operation.

    Returns:
        DownloadResult with every attempt recorded in order.

    Raises:
        ValueError: empty ``dest`` or ``candidate_urls``.
        PermissionDenied: the destination is not creatable.
        DownloadFailure: every URL failed; lists all of them.
    """
    if not str(dest):
        raise ValueError("destination path must not be empty")
    if not candidate_urls:
        raise ValueError("at least one candidate URL is required")

    dest = Path(dest)
    attempts: list[DownloadAttempt] = []

    for url in candidate_urls:
        error = probe_url(url, timeout=connect_timeout)
        if error:
            logger.info("Probe failed for %s: %s", url, error)
            attempts.append(DownloadAttempt(url=url, stage="probe", error=error))
            continue

        _ensure_creatable(dest)

        try:
            size = transfer(url, dest, timeout=connect_timeout)
        except (urllib.error.URLError, OSError, ValueError) as exc:
            reason = str(getattr(exc, "reason", exc))
            logger.info("Transfer failed for %s: %s", url, reason)
            attempts.append(DownloadAttempt(url=url, stage="transfer", error=reason))
            continue

        attempts.append(DownloadAttempt(url=url, ok=True, stage="transfer"))
        logger.info("Downloaded %s (%d bytes) from %s", dest.name, size, url)
        return DownloadResult(path=dest, url=url, size_bytes=size, attempts=attempts)

    raise DownloadFailure(attempts)
