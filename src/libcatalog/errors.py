"""
Exception hierarchy shared by the catalog services.
"""

from __future__ import annotations

from typing import Any, List, Sequence


class CatalogError(Exception):
    """Base class for every error raised by LibCatalog."""


class NotFoundError(CatalogError):
    """Raised when a requested identity does not exist in the store."""

    def __init__(self, kind: Any, identity: str) -> None:
        self.kind = kind
        self.identity = identity
        super().__init__(f"{kind} '{identity}' not found")


class IntegrityViolation(CatalogError):
    """
    Raised when a delete is blocked because other entities still reference
    the target.
    """

    def __init__(self, kind: Any, identity: str, blocking_dependents: Sequence[Any]) -> None:
        self.kind = kind
        self.identity = identity
        self.blocking_dependents: List[Any] = list(blocking_dependents)
        super().__init__(
            f"Cannot delete {kind} '{identity}': referenced by "
            f"{len(self.blocking_dependents)} record(s)"
        )
