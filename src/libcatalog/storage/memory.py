"""In-memory document store."""

from __future__ import annotations

import copy
import uuid
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.entities import EntityKind
from ..query import Q
from ..query.matcher import matches, sort_documents
from ..utils import get_logger
from .base import Document, Row


class InMemoryStore:
    """
    Thread-safe document store keeping everything in process memory.

    Documents are copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._collections: Dict[EntityKind, Dict[str, Document]] = {
            kind: {} for kind in EntityKind
        }
        self._lock = RLock()
        self.logger = get_logger("storage.memory")

    def find_by_id(self, kind: EntityKind, identity: str) -> Optional[Document]:
        with self._lock:
            document = self._collection(kind).get(identity)
            return copy.deepcopy(document) if document is not None else None

    def find_all(
        self,
        kind: EntityKind,
        where: Q | None = None,
        order_by: Sequence[str] = (),
    ) -> List[Row]:
        with self._lock:
            rows = [
                (identity, copy.deepcopy(document))
                for identity, document in self._collection(kind).items()
                if matches(where, identity, document)
            ]
        return sort_documents(rows, order_by)

    def count(self, kind: EntityKind, where: Q | None = None) -> int:
        with self._lock:
            return sum(
                1
                for identity, document in self._collection(kind).items()
                if matches(where, identity, document)
            )

    def insert(self, kind: EntityKind, document: Mapping[str, Any]) -> str:
        identity = uuid.uuid4().hex
        with self._lock:
            self._collection(kind)[identity] = copy.deepcopy(dict(document))
        self.logger.debug("Inserted %s %s", kind, identity)
        return identity

    def update(self, kind: EntityKind, identity: str, document: Mapping[str, Any]) -> bool:
        with self._lock:
            collection = self._collection(kind)
            if identity not in collection:
                return False
            collection[identity] = copy.deepcopy(dict(document))
        self.logger.debug("Updated %s %s", kind, identity)
        return True

    def delete(self, kind: EntityKind, identity: str) -> bool:
        with self._lock:
            removed = self._collection(kind).pop(identity, None)
        if removed is None:
            return False
        self.logger.debug("Deleted %s %s", kind, identity)
        return True

    def find_one_collated(self, kind: EntityKind, field: str, value: str) -> Optional[Row]:
        rows = self.find_all(kind, Q(**{f"{field}__iexact": value}))
        return rows[0] if rows else None

    def clear(self) -> None:
        with self._lock:
            for collection in self._collections.values():
                collection.clear()

    def close(self) -> None:
        return None

    def _collection(self, kind: EntityKind) -> Dict[str, Document]:
        return self._collections[EntityKind(kind)]
