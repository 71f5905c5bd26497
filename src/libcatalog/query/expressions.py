"""
Expression tree primitives for store filters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Tuple


AND = "AND"
OR = "OR"

LOOKUPS = ("exact", "iexact", "contains", "gt", "gte", "lt", "lte")


def split_lookup(field_lookup: str) -> Tuple[str, str]:
    if "__" in field_lookup:
        field_name, lookup = field_lookup.split("__", 1)
    else:
        field_name, lookup = field_lookup, "exact"
    if lookup not in LOOKUPS:
        raise ValueError(f"Unsupported lookup '{lookup}'")
    return field_name, lookup


@dataclass
class Q:
    """
    Boolean filter over document fields, similar to Django-style Q objects.

    ``Q(author=author_id)`` matches documents whose ``author`` equals the id,
    ``Q(genre__contains=genre_id)`` matches documents whose ``genre`` list
    holds it and ``Q(name__iexact="fantasy")`` compares under the catalog
    collation.
    """

    children: List[Any] = field(default_factory=list)
    connector: str = AND
    negated: bool = False

    def __init__(self, *children: Any, **lookups: Any) -> None:
        self.children = []
        if children:
            self.children.extend(children)
        if lookups:
            for key, value in lookups.items():
                split_lookup(key)
                self.children.append((key, value))
        self.connector = AND
        self.negated = False

    def __or__(self, other: "Q") -> "Q":
        return self._combine(other, OR)

    def __and__(self, other: "Q") -> "Q":
        return self._combine(other, AND)

    def __invert__(self) -> "Q":
        q = self._clone()
        q.negated = not q.negated
        return q

    # Internal helpers -------------------------------------------------
    def _clone(self) -> "Q":
        clone = Q()
        clone.children = list(self.children)
        clone.connector = self.connector
        clone.negated = self.negated
        return clone

    def _combine(self, other: "Q", connector: str) -> "Q":
        q = Q()
        q.children = [self._clone(), other._clone()]
        q.connector = connector
        return q

    def is_empty(self) -> bool:
        return not self.children
