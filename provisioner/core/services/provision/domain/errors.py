"""
L1 Domain — Provisioning error taxonomy.

Every failure is terminal for the run except the downloader's URL
fallback.  Each error carries enough context (paths, digests, URLs) for
the operator to act manually, and an ``exit_code`` the CLI forwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from provisioner.core.services.provision.execution.download import DownloadAttempt


class ProvisionError(Exception):
    """Base class for every failure that aborts a provisioning run."""

    exit_code = 1


class DependencyMissing(ProvisionError):
    """One or more required host tools cannot be resolved."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required tools: {', '.join(self.missing)}")


class UnsupportedHost(ProvisionError):
    """The host operating system is not the one the catalog targets."""

    def __init__(self, system: str, required: str) -> None:
        self.system = system
        self.required = required
        super().__init__(f"Unsupported host: {system or 'unknown'} (requires {required})")


class PermissionDenied(ProvisionError):
    """The prefix (or another path) is not writable, even with escalation."""

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = str(path)
        detail = f": {reason}" if reason else ""
        super().__init__(f"Permission denied for {self.path}{detail}")


class DownloadFailure(ProvisionError):
    """Every candidate URL was tried and none produced the archive."""

    def __init__(self, attempts: list[DownloadAttempt]) -> None:
        self.attempts = list(attempts)
        tried = ", ".join(a.url for a in self.attempts) or "(none)"
        super().__init__(f"Download failed; tried: {tried}")

    @property
    def tried_urls(self) -> list[str]:
        return [a.url for a in self.attempts]


class ChecksumMismatch(ProvisionError):
    """A downloaded archive does not match its pinned sha256 digest."""

    def __init__(self, path: str | Path, expected: str, actual: str | None) -> None:
        self.path = str(path)
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {self.path}: "
            f"expected {expected}, got {actual or 'nothing (file missing)'}"
        )


class ExtractionFailure(ProvisionError):
    """An archive could not be unpacked."""

    def __init__(self, archive: str | Path, reason: str) -> None:
        self.archive = str(archive)
        super().__init__(f"Failed to extract {self.archive}: {reason}")


class BuildStepFailure(ProvisionError):
    """An external build tool invocation returned non-zero."""

    def __init__(
        self,
        name: str,
        step: str,
        returncode: int | None = None,
        log_path: str | Path | None = None,
        detail: str = "",
    ) -> None:
        self.name = name
        self.step = step
        self.returncode = returncode
        self.log_path = str(log_path) if log_path else None
        message = f"{name}: {step} failed"
        if returncode is not None:
            message += f" (exit {returncode})"
        if detail:
            message += f": {detail}"
        if self.log_path:
            message += f"; see {self.log_path}"
        super().__init__(message)


class InterruptedByOperator(ProvisionError):
    """The run was aborted by an interrupt or termination signal."""

    def __init__(self, signum: int) -> None:
        self.signum = signum
        self.exit_code = 128 + signum
        super().__init__(f"Interrupted by signal {signum}")
