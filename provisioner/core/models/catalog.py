"""
Catalog model — one buildable tool and its fetch/build metadata.

Entries are immutable for the duration of a run.  The catalog order is
the only dependency constraint the provisioner enforces: a tool that a
later tool's build assumes must appear earlier.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

BuildRecipe = Literal["autotools", "script_installer", "bootstrap_copy"]


class CatalogEntry(BaseModel):
    """A pinned source package and the recipe that builds it."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    candidate_urls: tuple[str, ...] = Field(min_length=1)
    expected_checksum: str                  # sha256 hex digest
    build_recipe: BuildRecipe = "autotools"

    archive_suffix: str = ".tar.gz"
    configure_script: str = "configure"
    configure_args: tuple[str, ...] = ()
    make_args: tuple[str, ...] = ()
    install_target: str = "install"
    in_tree: bool = False                   # build inside the source dir
    version_command: tuple[str, ...] = ()   # default: (<binary>, "--version")
    binary: str = ""                        # default: name
    package_dirs: tuple[str, ...] = ()      # site-packages dirs the installer owns
    probe_prefix_only: bool = False         # ignore same-named tools outside the prefix

    @field_validator("expected_checksum")
    @classmethod
    def _hex_digest(cls, value: str) -> str:
        value = value.strip().lower()
        if len(value) != 64 or any(c not in "0123456789abcdef" for c in value):
            raise ValueError("expected_checksum must be a 64-character sha256 hex digest")
        return value

    @property
    def package_filename(self) -> str:
        """Archive name in the download cache, e.g. ``cmake-3.28.1.tar.gz``."""
        return f"{self.name}-{self.version}{self.archive_suffix}"

    @property
    def executable(self) -> str:
        return self.binary or self.name

    @property
    def probe_command(self) -> list[str]:
        """Command that makes the installed tool report its version."""
        if self.version_command:
            return list(self.version_command)
        return [self.executable, "--version"]
