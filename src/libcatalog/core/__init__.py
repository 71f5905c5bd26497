"""
Core entity definitions for the catalog.
"""

from .entities import (
    Author,
    Book,
    BookInstance,
    BookStatus,
    Entity,
    EntityKind,
    Genre,
    entity_from_row,
    format_date_medium,
    parse_iso_date,
)

__all__ = [
    "Author",
    "Book",
    "BookInstance",
    "BookStatus",
    "Entity",
    "EntityKind",
    "Genre",
    "entity_from_row",
    "format_date_medium",
    "parse_iso_date",
]
