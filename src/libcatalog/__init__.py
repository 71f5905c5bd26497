"""
LibCatalog public package initialization.

Catalog management for authors, books, genres and book copies: field
validation, genre deduplication and referential-integrity guarded deletes
over a pluggable document store.
"""

from .config import Catalog, CatalogSettings, create_catalog  # noqa: F401
from .core import Author, Book, BookInstance, BookStatus, EntityKind, Genre  # noqa: F401
from .errors import CatalogError, IntegrityViolation, NotFoundError  # noqa: F401
from .hooks import hooks  # noqa: F401
from .query import Q  # noqa: F401
from .services import (  # noqa: F401
    CatalogBrowser,
    Committed,
    DeleteResult,
    DeletionCheck,
    Failed,
    MutationPipeline,
    Rejected,
)
from .storage import InMemoryStore, SQLiteStore, StoreError, open_store  # noqa: F401
from .validation import FieldError, ValidationError  # noqa: F401

__all__ = [
    "Author",
    "Book",
    "BookInstance",
    "BookStatus",
    "Catalog",
    "CatalogBrowser",
    "CatalogError",
    "CatalogSettings",
    "Committed",
    "DeleteResult",
    "DeletionCheck",
    "EntityKind",
    "Failed",
    "FieldError",
    "Genre",
    "InMemoryStore",
    "IntegrityViolation",
    "MutationPipeline",
    "NotFoundError",
    "Q",
    "Rejected",
    "SQLiteStore",
    "StoreError",
    "ValidationError",
    "create_catalog",
    "hooks",
    "open_store",
]
