"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import hashlib
import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest

from provisioner.core.config.loader import Settings
from provisioner.core.models.catalog import CatalogEntry
from provisioner.core.models.plan import EntryDecision, RunPlan

EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def _write_tarball(path: Path, top: str, files: dict[str, str]) -> str:
    """Write a .tar.gz with every file under ``top/``; return its sha256."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for rel, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{top}/{rel}")
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    raw = buf.getvalue()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(raw)
    return hashlib.sha256(raw).hexdigest()


@pytest.fixture
def make_tarball() -> Callable[[Path, str, dict[str, str]], str]:
    """Factory: ``make_tarball(path, top_dir, {relpath: content}) -> sha256``."""
    return _write_tarball


@pytest.fixture
def make_entry() -> Callable[..., CatalogEntry]:
    """Factory for catalog entries with sensible test defaults."""

    def _make(name: str = "demo", version: str = "1.2.3", **overrides) -> CatalogEntry:
        data = {
            "name": name,
            "version": version,
            "candidate_urls": (f"https://mirror.test/{name}-{version}.tar.gz",),
            "expected_checksum": EMPTY_SHA256,
        }
        data.update(overrides)
        return CatalogEntry.model_validate(data)

    return _make


@pytest.fixture
def make_plan(tmp_path: Path) -> Callable[..., RunPlan]:
    """Build a RunPlan from ``(entry, skip)`` pairs."""

    def _make(decisions: list[tuple[CatalogEntry, bool]], **overrides) -> RunPlan:
        data = {
            "prefix": str(tmp_path / "prefix"),
            "jobs": 2,
            "download_dir": str(tmp_path / "downloads"),
            "decisions": [
                EntryDecision(
                    entry=entry,
                    skip=skip,
                    installed_version=entry.version if skip else None,
                )
                for entry, skip in decisions
            ],
        }
        data.update(overrides)
        return RunPlan(**data)

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings that accept any host and need no tools."""
    return Settings(
        prefix=str(tmp_path / "prefix"),
        download_dir=str(tmp_path / "downloads"),
        work_root=str(tmp_path / "work"),
        required_os="",
        required_tools=[],
        heartbeat_interval=0.05,
    )


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the developer's own config and env out of every test."""
    for var in ("PROVISIONER_CONFIG", "PROVISIONER_PREFIX", "PROVISIONER_JOBS",
                "PROVISIONER_LOG_LEVEL", "PROVISIONER_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "provisioner.core.config.loader.DEFAULT_CONFIG_PATH",
        tmp_path / "no-such-config.yml",
    )
