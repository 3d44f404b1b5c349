"""
Core domain models for the toolchain provisioner.

All models are Pydantic v2 BaseModels with strict validation.
"""

from provisioner.core.models.catalog import BuildRecipe, CatalogEntry
from provisioner.core.models.plan import EntryDecision, RunPlan

__all__ = [
    "BuildRecipe",
    "CatalogEntry",
    "EntryDecision",
    "RunPlan",
]
