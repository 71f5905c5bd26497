"""
SQL compilation translating :class:`Q` filters into SQLite JSON predicates.

Documents live in a ``document`` TEXT column holding JSON; fields are read
with ``json_extract`` and JSON paths are always bound as parameters.
"""

from __future__ import annotations

import re
from typing import Any, List, Sequence, Tuple

from .collation import COLLATION_NAME
from .expressions import Q, split_lookup

_FIELD_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COMPARISON_OPERATORS = {
    "exact": "=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}


def json_path(field_name: str) -> str:
    if not _FIELD_NAME_RE.match(field_name):
        raise ValueError(f"Invalid document field name '{field_name}'")
    return f"$.{field_name}"


class DocumentSQLCompiler:
    """
    Compile filters and orderings for a document table.
    """

    def __init__(self, where: Q | None = None, order_by: Sequence[str] = ()) -> None:
        self.where = where
        self.order_by = tuple(order_by)

    def compile_where(self) -> Tuple[str, List[Any]]:
        if self.where is None or self.where.is_empty():
            return "", []
        return self._compile_q(self.where)

    def compile_order_by(self) -> Tuple[str, List[Any]]:
        if not self.order_by:
            return "", []
        clauses: List[str] = []
        params: List[Any] = []
        for field_spec in self.order_by:
            descending = field_spec.startswith("-")
            name = field_spec[1:] if descending else field_spec
            expression, expression_params = self._field_expression(name)
            clauses.append(f"{expression} DESC" if descending else expression)
            params.extend(expression_params)
        return ", ".join(clauses), params

    # Helpers -----------------------------------------------------------
    def _field_expression(self, field_name: str) -> Tuple[str, List[Any]]:
        if field_name == "id":
            return '"id"', []
        return "json_extract(\"document\", ?)", [json_path(field_name)]

    def _compile_q(self, q: Q) -> Tuple[str, List[Any]]:
        parts: List[str] = []
        params: List[Any] = []

        for child in q.children:
            if isinstance(child, Q):
                child_sql, child_params = self._compile_q(child)
                if child_sql:
                    parts.append(f"({child_sql})")
                    params.extend(child_params)
            elif isinstance(child, tuple):
                field_lookup, value = child
                sql, child_params = self._compile_lookup(field_lookup, value)
                parts.append(sql)
                params.extend(child_params)

        if not parts:
            return "", []

        separator = f" {q.connector} "
        sql = separator.join(parts)
        if q.negated:
            sql = f"NOT ({sql})"
        return sql, params

    def _compile_lookup(self, field_lookup: str, value: Any) -> Tuple[str, List[Any]]:
        field_name, lookup = split_lookup(field_lookup)

        if lookup == "contains":
            return (
                "EXISTS (SELECT 1 FROM json_each(\"document\", ?) WHERE json_each.value = ?)",
                [json_path(field_name), value],
            )

        expression, params = self._field_expression(field_name)
        if value is None:
            if lookup != "exact":
                raise ValueError("NULL comparison only supported for equality.")
            return f"{expression} IS NULL", params

        if lookup == "iexact":
            return f"{expression} = ? COLLATE {COLLATION_NAME}", [*params, value]

        operator = _COMPARISON_OPERATORS[lookup]
        return f"{expression} {operator} ?", [*params, value]
