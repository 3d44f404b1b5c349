"""
L4 Execution — Checksum verification.

A missing file yields ``None`` rather than an error, so "absent" and
"wrong content" are both simply "needs (re)download" to the caller.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from provisioner.core.services.provision.domain.errors import ChecksumMismatch


def file_digest(path: str | Path) -> str | None:
    """Return the sha256 hex digest of ``path``, or None if it doesn't exist."""
    h = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                h.update(chunk)
    except FileNotFoundError:
        return None
    return h.hexdigest()


def digest_matches(actual: str | None, expected: str) -> bool:
    """Case-insensitive exact comparison; ``None`` never matches."""
    if actual is None:
        return False
    return actual.strip().lower() == expected.strip().lower()


def verify_file(path: str | Path, expected: str) -> str:
    """Raise ``ChecksumMismatch`` unless ``path`` hashes to ``expected``.

    Returns:
        The actual digest.
    """
    actual = file_digest(path)
    if not digest_matches(actual, expected):
        raise ChecksumMismatch(path, expected, actual)
    return actual  # type: ignore[return-value]
