"""
In-process evaluation of :class:`Q` filters and orderings against documents.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from .collation import collation_equal
from .expressions import AND, Q, split_lookup

Document = Mapping[str, Any]


def _field_value(document: Document, identity: str, field_name: str) -> Any:
    if field_name == "id":
        return identity
    return document.get(field_name)


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, (list, tuple)):
        return expected in actual
    return actual == expected


def _ordered(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is None:
            return False
        return op(actual, expected)

    return check


_LOOKUP_FUNCS: Dict[str, Callable[[Any, Any], bool]] = {
    "exact": lambda actual, expected: actual == expected,
    "iexact": collation_equal,
    "contains": _contains,
    "gt": _ordered(lambda a, b: a > b),
    "gte": _ordered(lambda a, b: a >= b),
    "lt": _ordered(lambda a, b: a < b),
    "lte": _ordered(lambda a, b: a <= b),
}


def matches(where: Q | None, identity: str, document: Document) -> bool:
    if where is None or where.is_empty():
        return True

    results: List[bool] = []
    for child in where.children:
        if isinstance(child, Q):
            results.append(matches(child, identity, document))
        elif isinstance(child, tuple):
            field_lookup, expected = child
            field_name, lookup = split_lookup(field_lookup)
            actual = _field_value(document, identity, field_name)
            results.append(_LOOKUP_FUNCS[lookup](actual, expected))

    outcome = all(results) if where.connector == AND else any(results)
    return not outcome if where.negated else outcome


def sort_documents(
    rows: Iterable[tuple[str, Document]], order_by: Sequence[str]
) -> List[tuple[str, Document]]:
    """
    Sort ``(identity, document)`` pairs by ``order_by`` (``-field`` for
    descending). Missing values sort first, as they do in SQLite.
    """
    result = list(rows)
    for field_spec in reversed(tuple(order_by)):
        descending = field_spec.startswith("-")
        name = field_spec[1:] if descending else field_spec

        def key(row: tuple[str, Document], name: str = name) -> tuple[int, Any]:
            value = _field_value(row[1], row[0], name)
            return (0, "") if value is None else (1, value)

        result.sort(key=key, reverse=descending)
    return result
