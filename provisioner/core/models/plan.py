"""
Run plan — the per-invocation decisions consumed by the orchestrator.

Computed once after argument parsing and host checks, serialized into
the working tree, and read back by the orchestrator process.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from provisioner.core.models.catalog import CatalogEntry


class EntryDecision(BaseModel):
    """Skip-or-build decision for a single catalog entry."""

    model_config = ConfigDict(frozen=True)

    entry: CatalogEntry
    skip: bool = False
    installed_version: str | None = None


class RunPlan(BaseModel):
    """Everything the orchestrator needs to provision one prefix."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    jobs: int = Field(ge=1)
    force: bool = False
    decisions: list[EntryDecision] = Field(default_factory=list)
    download_dir: str
    connect_timeout: int = 10
    escalated: bool = False

    @property
    def total(self) -> int:
        return len(self.decisions)

    @property
    def pending(self) -> list[EntryDecision]:
        """Decisions for entries that will actually be built."""
        return [d for d in self.decisions if not d.skip]

    @property
    def pending_count(self) -> int:
        return len(self.pending)

