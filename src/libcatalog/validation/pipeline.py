"""
Generic validation engine driven by the per-kind rule tables.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.entities import Entity, EntityKind
from .errors import FieldError, ValidationError
from .rules import UNSET, rules_for


def clean_fields(
    kind: EntityKind | str,
    raw_fields: Mapping[str, Any],
    *,
    identity: Optional[str] = None,
) -> Tuple[Entity, List[FieldError]]:
    """
    Normalize ``raw_fields`` into a candidate entity and collect every
    failure in rule declaration order.

    The candidate is always built, even when errors are present, so callers
    can redisplay the submitted values.
    """
    kind = EntityKind(kind)
    values: Dict[str, Any] = {}
    errors: List[FieldError] = []

    for rule in rules_for(kind):
        value, messages = rule.clean(raw_fields.get(rule.name))
        for message in messages:
            errors.append(FieldError(rule.name, message))
        if value is not UNSET:
            values[rule.name] = value

    candidate = kind.entity_class(id=identity, **values)
    return candidate, errors


def validate_fields(
    kind: EntityKind | str,
    raw_fields: Mapping[str, Any],
    *,
    identity: Optional[str] = None,
) -> Entity:
    """
    Like :func:`clean_fields` but raise :class:`ValidationError` on failure.
    """
    candidate, errors = clean_fields(kind, raw_fields, identity=identity)
    if errors:
        raise ValidationError(errors, candidate=candidate)
    return candidate
