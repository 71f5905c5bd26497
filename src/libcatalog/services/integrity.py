"""
Referential-integrity guard run before deletes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..core.entities import Entity, EntityKind, entity_from_row
from ..errors import IntegrityViolation, NotFoundError
from ..query import Q
from ..storage.base import DocumentStore
from ..utils import gather, get_logger
from ..utils.concurrency import DEFAULT_MAX_WORKERS
from .results import DeletionCheck


@dataclass(frozen=True)
class DependentLookup:
    """
    How to find the entities that reference an entity of a given kind.
    """

    kind: EntityKind
    where: Callable[[str], Q]
    order_by: Tuple[str, ...] = ()


DEPENDENT_LOOKUPS: Dict[EntityKind, Optional[DependentLookup]] = {
    EntityKind.AUTHOR: DependentLookup(EntityKind.BOOK, lambda pk: Q(author=pk), ("title",)),
    EntityKind.GENRE: DependentLookup(EntityKind.BOOK, lambda pk: Q(genre__contains=pk), ("title",)),
    EntityKind.BOOK: DependentLookup(EntityKind.BOOK_INSTANCE, lambda pk: Q(book=pk)),
    EntityKind.BOOK_INSTANCE: None,
}


class IntegrityGuard:
    """
    Blocks deletion of entities that still have dependents.

    The dependent lookup and the delete are two store calls. A dependent
    created in between is not seen and ends up with a dangling reference.
    """

    def __init__(self, store: DocumentStore, *, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self.store = store
        self.max_workers = max_workers
        self.logger = get_logger("services.integrity")

    def dependents(self, kind: EntityKind | str, identity: str) -> List[Entity]:
        lookup = DEPENDENT_LOOKUPS[EntityKind(kind)]
        if lookup is None:
            return []
        rows = self.store.find_all(lookup.kind, lookup.where(identity), lookup.order_by)
        return [entity_from_row(lookup.kind, row) for row in rows]

    def check(self, kind: EntityKind | str, identity: str) -> DeletionCheck:
        """
        Fetch the entity and its dependents together and report whether it
        may be deleted. Raises :class:`NotFoundError` for unknown identities.
        """
        kind = EntityKind(kind)
        document, dependents = gather(
            lambda: self.store.find_by_id(kind, identity),
            lambda: self.dependents(kind, identity),
            max_workers=self.max_workers,
        )
        if document is None:
            raise NotFoundError(kind, identity)
        entity = kind.entity_class.from_document(identity, document)
        return DeletionCheck(entity=entity, blocking_dependents=dependents)

    def delete(self, kind: EntityKind | str, identity: str) -> Entity:
        kind = EntityKind(kind)
        check = self.check(kind, identity)
        if not check.deletable:
            self.logger.info(
                "Refusing to delete %s %s: %d dependent(s)",
                kind,
                identity,
                len(check.blocking_dependents),
            )
            raise IntegrityViolation(kind, identity, check.blocking_dependents)
        if not self.store.delete(kind, identity):
            raise NotFoundError(kind, identity)
        self.logger.info("Deleted %s %s", kind, identity)
        return check.entity
