"""
Genre deduplication by collation-equal name.
"""

from __future__ import annotations

from typing import Optional

from ..core.entities import EntityKind, Genre, entity_from_row
from ..storage.base import DocumentStore
from ..utils import get_logger


class GenreMatcher:
    """
    Find an existing Genre whose name equals a candidate name ignoring case
    but respecting accents.

    The lookup and the later insert are separate store calls, so two
    concurrent creates of the same name can both miss and both insert.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.logger = get_logger("services.dedup")

    def find_existing(self, name: str) -> Optional[Genre]:
        row = self.store.find_one_collated(EntityKind.GENRE, "name", name)
        if row is None:
            return None
        genre = entity_from_row(EntityKind.GENRE, row)
        self.logger.debug("Genre %r matches existing %s", name, genre.id)
        return genre  # type: ignore[return-value]
