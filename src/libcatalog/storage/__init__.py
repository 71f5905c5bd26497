"""
Document stores and the factory that builds them from a DSN.
"""

from __future__ import annotations

from .base import (
    Document,
    DocumentStore,
    Row,
    StoreConfig,
    StoreConfigurationError,
    StoreConnectionError,
    StoreError,
    StoreExecutionError,
)
from .memory import InMemoryStore
from .sqlite import SQLiteStore


def open_store(dsn: str = "memory://", *, slow_call_ms: int = 100) -> DocumentStore:
    """
    Build a store for ``dsn`` (``memory://`` or ``sqlite:///path``).
    """
    config = StoreConfig.from_dsn(dsn)
    if config.backend == "sqlite":
        return SQLiteStore(config, slow_call_ms=slow_call_ms)
    return InMemoryStore()


__all__ = [
    "Document",
    "DocumentStore",
    "InMemoryStore",
    "Row",
    "SQLiteStore",
    "StoreConfig",
    "StoreConfigurationError",
    "StoreConnectionError",
    "StoreError",
    "StoreExecutionError",
    "open_store",
]
