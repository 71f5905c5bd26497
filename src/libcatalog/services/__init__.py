"""
Catalog services: mutation pipeline, integrity guard, dedup and browsing.
"""

from .browse import CatalogBrowser, CatalogSummary
from .dedup import GenreMatcher
from .integrity import DEPENDENT_LOOKUPS, IntegrityGuard
from .pipeline import MutationPipeline
from .results import (
    Committed,
    DeleteResult,
    DeletionCheck,
    Failed,
    PipelineResult,
    Rejected,
)

__all__ = [
    "CatalogBrowser",
    "CatalogSummary",
    "Committed",
    "DEPENDENT_LOOKUPS",
    "DeleteResult",
    "DeletionCheck",
    "Failed",
    "GenreMatcher",
    "IntegrityGuard",
    "MutationPipeline",
    "PipelineResult",
    "Rejected",
]
