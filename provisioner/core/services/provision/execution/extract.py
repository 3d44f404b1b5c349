"""
L4 Execution — Archive extraction.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path

from provisioner.core.services.provision.domain.errors import ExtractionFailure

logger = logging.getLogger(__name__)


def extract_archive(archive: str | Path, dest: str | Path) -> Path:
    """Unpack ``archive`` into a fresh ``dest`` directory.

    Any previous extraction at ``dest`` is removed first, so re-runs
    are idempotent.

    Returns:
        The source root: the single top-level directory of the archive
        if there is exactly one, else ``dest`` itself.

    Raises:
        ExtractionFailure: unreadable or corrupt archive.
    """
    archive = Path(archive)
    dest = Path(dest)

    if dest.exists():
        shutil.rmtree(dest)
    dest.mkdir(parents=True)

    try:
        with tarfile.open(archive, "r:*") as tf:
            tf.extractall(dest, filter="data")
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ExtractionFailure(archive, str(exc)) from exc

    entries = list(dest.iterdir())
    subdirs = [p for p in entries if p.is_dir()]
    if len(entries) == 1 and len(subdirs) == 1:
        return subdirs[0]
    return dest
